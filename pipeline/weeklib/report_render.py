from weeklib.event_classifier import BucketSet

SECTIONS = (
	("opened_issues", "Opened issues"),
	("closed_issues", "Closed issues"),
	("commented_issues", "Commented issues"),
	("opened_pull_requests", "Pull requests opened"),
	("closed_pull_requests", "Pull requests closed"),
	("reviewed_pull_requests", "Code reviews"),
)


#============================================
def format_repo(repo_name: str) -> str:
	return f"-   **{repo_name}**\n\n"


#============================================
def format_merged(merged) -> str:
	"""
	Suffix for a pull request bullet; empty when merge state is unknown.
	"""
	if merged is None:
		return ""
	if merged:
		return " [merged]"
	return " [not merged]"


#============================================
def format_item(item: dict) -> str:
	line = f"    -   [{item['title']}]({item['url']})"
	if "merged" in item:
		line += format_merged(item["merged"])
	return line + "\n"


#============================================
def render_section(heading: str, bucket: dict[str, dict[int, dict]]) -> str:
	"""
	Render one bucket: repos alphabetically, items by ascending number.
	"""
	parts = [f"### {heading}\n\n"]
	for repo_name in sorted(bucket):
		parts.append(format_repo(repo_name))
		items = bucket[repo_name]
		for number in sorted(items):
			parts.append(format_item(items[number]))
		parts.append("\n")
	parts.append("\n")
	return "".join(parts)


#============================================
def render_report(buckets: BucketSet) -> str:
	"""
	Render the Markdown digest; empty buckets produce no section.
	"""
	sections = []
	for bucket_name, heading in SECTIONS:
		bucket = getattr(buckets, bucket_name)
		if not bucket:
			continue
		sections.append(render_section(heading, bucket))
	return "".join(sections)
