#!/usr/bin/env python3
"""
Report the issues and pull requests a GitHub user worked on last week.

Useful for sharing with coworkers, or just for your own notes.
"""
import argparse
import os
import sys
from datetime import datetime

import rich.console

from weeklib import event_classifier
from weeklib import event_feed
from weeklib import github_client
from weeklib import interrupt_watch
from weeklib import report_render
from weeklib import run_settings
from weeklib import time_window

RICH_CONSOLE = rich.console.Console(stderr=True)


#============================================
def log_step(message: str) -> None:
	"""
	Print one timestamped progress line to stderr.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	line = f"[lastweek {now_text}] {message}"
	lower = message.lower()
	style = "cyan"
	if ("failed" in lower) or ("error" in lower) or ("interrupted" in lower):
		style = "bold red"
	elif ("rate limit" in lower) or ("not set" in lower) or ("skipping" in lower):
		style = "yellow"
	elif ("collected" in lower) or ("identified" in lower):
		style = "green"
	RICH_CONSOLE.print(line, style=style, markup=False, highlight=False)


#============================================
def report_failure(message: str) -> None:
	"""
	Print the fatal error message to stderr.
	"""
	RICH_CONSOLE.print(message, style="bold red", markup=False, highlight=False)


#============================================
def format_api_usage(usage: dict) -> str:
	"""
	Summarize API call counters, busiest endpoints first.
	"""
	line = f"GitHub API usage: calls={usage.get('api_call_count', 0)}"
	by_context = usage.get("api_calls_by_context") or {}
	if not by_context:
		return line
	ordered = sorted(by_context.items(), key=lambda pair: (-pair[1], pair[0]))
	detail = ", ".join(f"{context}={count}" for context, count in ordered)
	return f"{line} ({detail})"


#============================================
def build_parser() -> argparse.ArgumentParser:
	"""
	Build the command-line parser; flags accept one or two leading dashes.
	"""
	parser = argparse.ArgumentParser(
		description="Print a Markdown digest of last week's GitHub activity."
	)
	parser.add_argument(
		"-user", "--user",
		dest="user",
		default="",
		help="Your GitHub username (falls back to $GITHUB_USERNAME, then the token owner).",
	)
	parser.add_argument(
		"-token", "--token",
		dest="token",
		default="",
		help="Your GitHub access token (falls back to $GITHUB_TOKEN).",
	)
	parser.add_argument(
		"-start_date", "--start_date",
		dest="start_date",
		default="",
		help="The start date in ISO layout. E.g. YYYY-MM-DD",
	)
	parser.add_argument(
		"-end_date", "--end_date",
		dest="end_date",
		default="",
		help="The end date in ISO layout, exclusive. E.g. YYYY-MM-DD",
	)
	parser.add_argument(
		"-start_of_week", "--start_of_week",
		dest="start_of_week",
		default=run_settings.DEFAULT_START_OF_WEEK,
		help="The first day of your snippet week.",
	)
	parser.add_argument(
		"-weeks_back", "--weeks_back",
		dest="weeks_back",
		type=int,
		default=run_settings.DEFAULT_WEEKS_BACK,
		help="The number of weeks ago to see snippets for (0 is the current week).",
	)
	return parser


#============================================
def parse_args(argv=None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = build_parser()
	args = parser.parse_args(argv)
	return args


#============================================
def run_digest(
	args: argparse.Namespace,
	environ,
	interrupt=None,
	client_factory=github_client.GitHubClient,
	now: datetime | None = None,
) -> str:
	"""
	Resolve settings, pull the event feed, and return the rendered digest.
	"""
	token = run_settings.resolve_token(args.token, environ, log_fn=log_step)
	client = client_factory(token, log_fn=log_step)
	user = run_settings.resolve_username(
		args.user,
		environ,
		token,
		client.get_authenticated_login,
		log_fn=log_step,
	)
	config = run_settings.build_run_config(args, token, user)
	window = time_window.resolve_time_window(
		config.start_date,
		config.end_date,
		config.start_of_week,
		config.weeks_back,
		now=now,
		tz=time_window.resolve_local_timezone(),
		log_fn=log_step,
	)
	log_step(
		f"Pulling contributions from {window.start.isoformat()} "
		+ f"to {window.end.isoformat()}..."
	)

	events = event_feed.collect_user_events(
		lambda page: client.list_user_events_page(config.user, page),
		interrupt=interrupt,
		log_fn=log_step,
	)
	buckets = event_classifier.BucketSet()
	in_window_count = event_classifier.classify_events(
		events,
		window,
		config.user,
		buckets,
		client.get_pull_request,
		interrupt=interrupt,
	)
	counts = buckets.counts()
	log_step(
		f"Classified {in_window_count} of {len(events)} event(s) in window: "
		+ ", ".join(f"{name}={count}" for name, count in counts.items())
	)
	log_step(format_api_usage(client.api_usage_snapshot()))
	if interrupt is not None:
		interrupt.check("rendering the report")
	return report_render.render_report(buckets)


#============================================
def main() -> None:
	"""
	Run the digest and print it, or print the error and exit 1.
	"""
	args = parse_args()
	try:
		with interrupt_watch.InterruptWatch() as interrupt:
			report = run_digest(args, os.environ, interrupt=interrupt)
	except RuntimeError as error:
		report_failure(str(error))
		sys.exit(1)
	print(report)


if __name__ == "__main__":
	main()
