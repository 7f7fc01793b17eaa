from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone

BUCKET_NAMES = (
	"opened_issues",
	"closed_issues",
	"commented_issues",
	"opened_pull_requests",
	"closed_pull_requests",
	"reviewed_pull_requests",
)
PULL_REQUEST_OPEN_ACTIONS = {"created", "opened", "reopened"}
CLASSIFIED_EVENT_TYPES = {
	"IssueCommentEvent",
	"IssuesEvent",
	"PullRequestEvent",
	"PullRequestReviewCommentEvent",
}


#============================================
class MalformedEventError(RuntimeError):
	"""
	Raised when an event payload lacks a required reference.
	"""


#============================================
@dataclass
class BucketSet:
	"""
	Six repo -> number -> item maps; later records for a key replace earlier ones.
	"""
	opened_issues: dict[str, dict[int, dict]] = field(default_factory=dict)
	closed_issues: dict[str, dict[int, dict]] = field(default_factory=dict)
	commented_issues: dict[str, dict[int, dict]] = field(default_factory=dict)
	opened_pull_requests: dict[str, dict[int, dict]] = field(default_factory=dict)
	closed_pull_requests: dict[str, dict[int, dict]] = field(default_factory=dict)
	reviewed_pull_requests: dict[str, dict[int, dict]] = field(default_factory=dict)

	#============================================
	def record(self, bucket_name: str, repo_name: str, item: dict) -> None:
		bucket = getattr(self, bucket_name)
		if repo_name not in bucket:
			bucket[repo_name] = {}
		bucket[repo_name][item["number"]] = item

	#============================================
	def counts(self) -> dict[str, int]:
		"""
		Count stored items per bucket.
		"""
		result = {}
		for name in BUCKET_NAMES:
			bucket = getattr(self, name)
			result[name] = sum(len(items) for items in bucket.values())
		return result


#============================================
def parse_iso(ts: str) -> datetime:
	"""
	Parse an ISO timestamp string into a timezone-aware datetime.
	"""
	parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed


#============================================
def require(value, what: str, event: dict):
	"""
	Return value or raise MalformedEventError naming the missing field.
	"""
	if value is None:
		event_id = event.get("id") or "(no id)"
		event_type = event.get("type") or "(no type)"
		raise MalformedEventError(f"{what} is missing in {event_type} event {event_id}")
	return value


#============================================
def require_number(value, what: str, event: dict) -> int:
	"""
	Return an item number or raise MalformedEventError when it is not an int.
	"""
	number = require(value, what, event)
	if isinstance(number, bool) or not isinstance(number, int):
		event_id = event.get("id") or "(no id)"
		raise MalformedEventError(f"{what} {number!r} is not an integer in event {event_id}")
	return number


#============================================
def parse_event_time(event: dict) -> datetime:
	"""
	Parse created_at, raising MalformedEventError when it is unreadable.
	"""
	created_at = require(event.get("created_at"), "created_at", event)
	try:
		return parse_iso(str(created_at))
	except ValueError as error:
		event_id = event.get("id") or "(no id)"
		raise MalformedEventError(
			f"created_at {created_at!r} is not an ISO timestamp in event {event_id}"
		) from error


#============================================
def issue_to_item(issue: dict, event: dict) -> dict:
	"""
	Normalize a raw issue payload to the digest item shape.
	"""
	user = issue.get("user") or {}
	item = {
		"number": require_number(issue.get("number"), "issue number", event),
		"title": issue.get("title") or "",
		"url": issue.get("html_url") or "",
		"author_login": user.get("login") or "",
		"is_pull_request": issue.get("pull_request") is not None,
	}
	return item


#============================================
def pull_request_to_item(pull: dict, event: dict) -> dict:
	"""
	Normalize a raw pull request payload; merged is None when not reported.
	"""
	merged = None
	if pull.get("merged") is not None:
		merged = bool(pull["merged"])
	item = {
		"number": require_number(pull.get("number"), "pull request number", event),
		"title": pull.get("title") or "",
		"url": pull.get("html_url") or "",
		"merged": merged,
	}
	return item


#============================================
def classify_issue_comment(event, payload, repo_name, current_username, buckets, fetch_pull_request, interrupt):
	issue = require(payload.get("issue"), "issue", event)
	action = require(payload.get("action"), "action", event)
	if action != "created":
		return
	item = issue_to_item(issue, event)
	if not item["is_pull_request"]:
		buckets.record("commented_issues", repo_name, item)
		return
	# comments on someone else's pull request count as review activity
	if item["author_login"] == current_username:
		return
	if interrupt is not None:
		interrupt.check(f"looking up {repo_name}#{item['number']}")
	pull = fetch_pull_request(repo_name, item["number"])
	buckets.record("reviewed_pull_requests", repo_name, pull_request_to_item(pull, event))


#============================================
def classify_issue(event, payload, repo_name, buckets):
	issue = require(payload.get("issue"), "issue", event)
	action = require(payload.get("action"), "action", event)
	if action == "opened":
		buckets.record("opened_issues", repo_name, issue_to_item(issue, event))
	elif action == "closed":
		buckets.record("closed_issues", repo_name, issue_to_item(issue, event))


#============================================
def classify_pull_request(event, payload, repo_name, buckets):
	pull = require(payload.get("pull_request"), "pull_request", event)
	action = require(payload.get("action"), "action", event)
	if action in PULL_REQUEST_OPEN_ACTIONS:
		buckets.record("opened_pull_requests", repo_name, pull_request_to_item(pull, event))
	elif action == "closed":
		buckets.record("closed_pull_requests", repo_name, pull_request_to_item(pull, event))


#============================================
def classify_review_comment(event, payload, repo_name, buckets):
	pull = require(payload.get("pull_request"), "pull_request", event)
	action = require(payload.get("action"), "action", event)
	if action == "created":
		buckets.record("reviewed_pull_requests", repo_name, pull_request_to_item(pull, event))


#============================================
def classify_events(
	events,
	window,
	current_username: str,
	buckets: BucketSet,
	fetch_pull_request,
	interrupt=None,
) -> int:
	"""
	Sort in-window events into buckets, in the order given.

	fetch_pull_request(repo_full_name, number) returns the raw pull request
	dict for comments left on other people's pull requests. Returns the
	number of in-window events seen.
	"""
	seen = 0
	for event in events:
		if not window.contains(parse_event_time(event)):
			continue
		seen += 1
		event_type = event.get("type") or ""
		if event_type not in CLASSIFIED_EVENT_TYPES:
			continue
		repo = event.get("repo") or {}
		repo_name = require(repo.get("name"), "repo name", event)
		payload = event.get("payload") or {}
		if event_type == "IssueCommentEvent":
			classify_issue_comment(
				event,
				payload,
				repo_name,
				current_username,
				buckets,
				fetch_pull_request,
				interrupt,
			)
		elif event_type == "IssuesEvent":
			classify_issue(event, payload, repo_name, buckets)
		elif event_type == "PullRequestEvent":
			classify_pull_request(event, payload, repo_name, buckets)
		elif event_type == "PullRequestReviewCommentEvent":
			classify_review_comment(event, payload, repo_name, buckets)
	return seen
