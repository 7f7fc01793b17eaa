from datetime import datetime
from datetime import timezone
from urllib.parse import parse_qs
from urllib.parse import urlparse

import requests
from github import Auth
from github import Github
from github.GithubException import GithubException
from github.GithubException import RateLimitExceededException

EVENTS_PER_PAGE = 100


#============================================
class TransportError(RuntimeError):
	"""
	Raised when a GitHub API call fails.
	"""


#============================================
class RateLimitError(TransportError):
	"""
	Raised when GitHub API rate limits block further requests.
	"""


#============================================
def parse_link_pages(link_header: str) -> tuple[int, int]:
	"""
	Read next/last page numbers from a Link header (0 when absent).
	"""
	pages = {"next": 0, "last": 0}
	if not link_header:
		return 0, 0
	for link in requests.utils.parse_header_links(link_header):
		rel = link.get("rel", "")
		if rel not in pages:
			continue
		query = parse_qs(urlparse(link.get("url", "")).query)
		values = query.get("page") or ["0"]
		try:
			pages[rel] = int(values[0])
		except ValueError:
			pages[rel] = 0
	return pages["next"], pages["last"]


#============================================
def github_error_message(error: GithubException) -> str:
	"""
	Return the message GitHub sent with a failed call.
	"""
	data = getattr(error, "data", None)
	if isinstance(data, dict) and data.get("message"):
		return str(data["message"])
	return str(error)


#============================================
class GitHubClient:
	"""
	Thin PyGithub wrapper for the activity digest.
	"""

	def __init__(self, token: str, log_fn=None):
		self.log_fn = log_fn
		self.authenticated = bool(token)
		self._api_call_count = 0
		self._api_calls_by_context: dict[str, int] = {}
		self.client = self._build_github_client(token)

	#============================================
	def _build_github_client(self, token: str) -> Github:
		"""
		Create Github client with retry disabled.
		"""
		if token:
			return Github(auth=Auth.Token(token), retry=None)
		return Github(retry=None)

	#============================================
	def log(self, message: str) -> None:
		"""
		Emit one log line when logger is configured.
		"""
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def record_api_call(self, context: str) -> None:
		"""
		Track one outbound GitHub API call.
		"""
		self._api_call_count += 1
		if context not in self._api_calls_by_context:
			self._api_calls_by_context[context] = 0
		self._api_calls_by_context[context] += 1

	#============================================
	def api_usage_snapshot(self) -> dict:
		"""
		Return API call counters for reporting.
		"""
		return {
			"api_call_count": self._api_call_count,
			"api_calls_by_context": dict(self._api_calls_by_context),
		}

	#============================================
	def normalize_datetime(self, value: datetime) -> datetime:
		"""
		Normalize datetime to timezone-aware UTC.
		"""
		if value.tzinfo is None:
			return value.replace(tzinfo=timezone.utc)
		return value.astimezone(timezone.utc)

	#============================================
	def parse_rate_limit_reset(self, reset_value) -> datetime:
		"""
		Normalize PyGithub reset values to timezone-aware UTC datetime.
		"""
		if isinstance(reset_value, datetime):
			return self.normalize_datetime(reset_value)
		if isinstance(reset_value, (int, float)):
			return datetime.fromtimestamp(float(reset_value), tz=timezone.utc)
		if isinstance(reset_value, str):
			return datetime.fromisoformat(reset_value.replace("Z", "+00:00"))
		raise RuntimeError(f"Unsupported rate-limit reset value: {reset_value!r}")

	#============================================
	def get_core_rate_limit_snapshot(self) -> tuple[int, datetime]:
		"""
		Read core rate-limit remaining/reset across PyGithub versions.
		"""
		self.record_api_call("GET /rate_limit")
		overview = self.client.get_rate_limit()
		rate_limit = getattr(overview, "core", None)
		if rate_limit is None:
			resources = getattr(overview, "resources", None)
			if isinstance(resources, dict):
				rate_limit = resources.get("core")
			elif resources is not None:
				rate_limit = getattr(resources, "core", None)
		if rate_limit is None:
			raise RuntimeError("Rate limit data does not expose core resource fields.")
		remaining = int(getattr(rate_limit, "remaining"))
		reset_time = self.parse_rate_limit_reset(getattr(rate_limit, "reset"))
		return remaining, reset_time

	#============================================
	def call_api(self, context: str, call_fn):
		"""
		Run one API call, translating client failures to TransportError.
		"""
		try:
			self.record_api_call(context)
			return call_fn()
		except GithubException as error:
			self.raise_from_github_error(error, context)
		except requests.exceptions.RequestException as error:
			raise TransportError(f"GitHub request failed while {context}: {error}") from error

	#============================================
	def is_rate_limit_error(self, error: GithubException) -> bool:
		"""
		Check the exception type, remaining-quota header and message for rate limiting.
		"""
		if isinstance(error, RateLimitExceededException):
			return True
		headers = getattr(error, "headers", None) or {}
		remaining_header = str(headers.get("x-ratelimit-remaining", "")).strip()
		if remaining_header == "0":
			return True
		return "rate limit" in github_error_message(error).lower()

	#============================================
	def raise_from_github_error(self, error: GithubException, context: str) -> None:
		"""
		Raise a human-readable rate-limit error or a wrapped transport error.
		"""
		status = getattr(error, "status", None)
		message = github_error_message(error)
		if status not in (403, 429):
			raise TransportError(
				f"GitHub API call failed while {context}: {message}"
			) from error
		reset_text = "unknown"
		remaining = None
		try:
			remaining, reset_time = self.get_core_rate_limit_snapshot()
			reset_text = reset_time.isoformat()
		except (GithubException, RuntimeError, requests.exceptions.RequestException) as snapshot_error:
			self.log(f"Rate limit snapshot unavailable: {snapshot_error}")
		if (remaining != 0) and not self.is_rate_limit_error(error):
			raise TransportError(
				f"GitHub API call failed while {context} (HTTP {status}): {message}"
			) from error
		remaining_text = "unknown" if remaining is None else str(remaining)
		hint = "Provide -token or $GITHUB_TOKEN for higher limits."
		if self.authenticated:
			hint = "Wait for the reset time and run again."
		raise RateLimitError(
			"GitHub API rate limit exceeded while "
			+ f"{context}; remaining={remaining_text}; reset_at={reset_text}. "
			+ hint
		) from error

	#============================================
	def get_authenticated_login(self) -> str:
		"""
		Return the login that owns the configured token.
		"""
		return self.call_api(
			"GET /user",
			lambda: self.client.get_user().login,
		)

	#============================================
	def list_user_events_page(self, user: str, page: int) -> tuple[list[dict], int, int]:
		"""
		Fetch one page of events performed by a user.

		Returns the raw event dicts plus the next and last page numbers
		reported by the Link header.
		"""
		url = f"/users/{user}/events"
		headers, data = self.call_api(
			f"GET {url}",
			lambda: self.client.requester.requestJsonAndCheck(
				"GET",
				url,
				parameters={"page": page, "per_page": EVENTS_PER_PAGE},
			),
		)
		events = data if isinstance(data, list) else []
		next_page, last_page = parse_link_pages((headers or {}).get("link", ""))
		return events, next_page, last_page

	#============================================
	def get_pull_request(self, repo_full_name: str, number: int) -> dict:
		"""
		Fetch one pull request as a REST-like dict.
		"""
		pull_obj = self.call_api(
			f"GET /repos/{repo_full_name}/pulls/{number}",
			lambda: self.client.get_repo(repo_full_name, lazy=True).get_pull(number),
		)
		return dict(getattr(pull_obj, "raw_data", {}) or {})
