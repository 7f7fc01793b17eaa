#============================================
def collect_user_events(fetch_page, interrupt=None, log_fn=None) -> list[dict]:
	"""
	Pull every page of the user event feed, newest first.

	fetch_page(page) returns (events, next_page, last_page). Paging stops on
	the last page or when the reported next page does not move forward,
	since the provider's pages can loop around.
	"""
	events: list[dict] = []
	page = 0
	while True:
		if interrupt is not None:
			interrupt.check(f"fetching event page {page}")
		page_events, next_page, last_page = fetch_page(page)
		events.extend(page_events)
		if log_fn is not None:
			log_fn(f"Event page {page}: collected {len(page_events)} event(s).")
		if page == last_page or next_page <= page:
			break
		page = next_page
	return events
