import argparse

import pytest

from weeklib import run_settings


#============================================
def make_args(**kwargs) -> argparse.Namespace:
	"""
	Build a namespace shaped like the CLI parser output.
	"""
	defaults = {
		"user": "",
		"token": "",
		"start_date": "",
		"end_date": "",
		"start_of_week": "Saturday",
		"weeks_back": 1,
	}
	defaults.update(kwargs)
	return argparse.Namespace(**defaults)


#============================================
def fail_lookup():
	raise AssertionError("login lookup should not run")


#============================================
def test_resolve_token_prefers_flag() -> None:
	"""
	The -token flag wins over $GITHUB_TOKEN.
	"""
	messages = []
	token = run_settings.resolve_token("flag-token", {"GITHUB_TOKEN": "env-token"}, log_fn=messages.append)
	assert token == "flag-token"
	assert "via flag" in messages[0]


#============================================
def test_resolve_token_reads_env_stripped() -> None:
	"""
	$GITHUB_TOKEN is used with surrounding whitespace removed.
	"""
	assert run_settings.resolve_token("", {"GITHUB_TOKEN": "  env-token \n"}) == "env-token"


#============================================
def test_resolve_token_missing_warns_and_returns_empty() -> None:
	"""
	No token means unauthenticated mode with a rate-limit warning.
	"""
	messages = []
	assert run_settings.resolve_token("", {}, log_fn=messages.append) == ""
	assert "rate-limiting" in messages[0]


#============================================
def test_resolve_username_precedence() -> None:
	"""
	Flag beats env, env beats token lookup.
	"""
	environ = {"GITHUB_USERNAME": " env-user "}
	assert run_settings.resolve_username("flag-user", environ, "tok", fail_lookup) == "flag-user"
	assert run_settings.resolve_username("", environ, "tok", fail_lookup) == "env-user"
	assert run_settings.resolve_username("", {}, "tok", lambda: "token-owner") == "token-owner"


#============================================
def test_resolve_username_without_token_or_user_raises() -> None:
	"""
	No username and no token to detect it from is a config error.
	"""
	with pytest.raises(run_settings.ConfigError):
		run_settings.resolve_username("", {}, "", fail_lookup)


#============================================
def test_resolve_username_empty_login_raises() -> None:
	"""
	A token lookup that yields no login fails identification.
	"""
	with pytest.raises(run_settings.ConfigError, match="failed to identify user"):
		run_settings.resolve_username("", {}, "tok", lambda: "")


#============================================
def test_build_run_config_copies_flags() -> None:
	"""
	The run config carries the resolved identity and trimmed flag values.
	"""
	args = make_args(start_date=" 2026-10-01 ", end_date="2026-10-08", weeks_back=2)
	config = run_settings.build_run_config(args, "tok", "alice")
	assert config == run_settings.RunConfig(
		user="alice",
		token="tok",
		start_date="2026-10-01",
		end_date="2026-10-08",
		start_of_week="Saturday",
		weeks_back=2,
	)


#============================================
def test_build_run_config_defaults_start_of_week() -> None:
	"""
	An empty start_of_week falls back to Saturday.
	"""
	config = run_settings.build_run_config(make_args(start_of_week=""), "", "alice")
	assert config.start_of_week == "Saturday"


#============================================
def test_build_run_config_invalid_weeks_back_raises() -> None:
	"""
	Non-integer weeks_back raises ConfigError.
	"""
	with pytest.raises(run_settings.ConfigError):
		run_settings.build_run_config(make_args(weeks_back="two"), "", "alice")
