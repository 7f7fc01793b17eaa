from dataclasses import dataclass

DEFAULT_START_OF_WEEK = "Saturday"
DEFAULT_WEEKS_BACK = 1
TOKEN_ENV_NAME = "GITHUB_TOKEN"
USERNAME_ENV_NAME = "GITHUB_USERNAME"
TOKEN_HELP_URL = (
	"https://help.github.com/articles/creating-a-personal-access-token-for-the-command-line/"
)


#============================================
class ConfigError(RuntimeError):
	"""
	Raised for missing or invalid run settings.
	"""


#============================================
@dataclass(frozen=True)
class RunConfig:
	user: str
	token: str
	start_date: str
	end_date: str
	start_of_week: str
	weeks_back: int


#============================================
def get_env_str(environ, name: str) -> str:
	"""
	Read one environment value with surrounding whitespace removed.
	"""
	value = environ.get(name, "")
	if value is None:
		return ""
	return str(value).strip()


#============================================
def resolve_token(flag_value: str, environ, log_fn=None) -> str:
	"""
	Resolve the access token: flag first, then $GITHUB_TOKEN.

	An empty result means unauthenticated mode.
	"""
	log = log_fn or (lambda message: None)
	token = (flag_value or "").strip()
	if token:
		log("Using GitHub personal access token provided via flag.")
		return token
	token = get_env_str(environ, TOKEN_ENV_NAME)
	if token:
		log(f"Using GitHub personal access token found in ${TOKEN_ENV_NAME}.")
		return token
	log(
		f"${TOKEN_ENV_NAME} or -token flag not set - GitHub may block your queries "
		+ f"due to rate-limiting ({TOKEN_HELP_URL}). "
		+ "Also note private repository activity will not be reported."
	)
	return ""


#============================================
def resolve_username(flag_value: str, environ, token: str, lookup_login, log_fn=None) -> str:
	"""
	Resolve the username: flag, then $GITHUB_USERNAME, then the token owner.

	lookup_login is called with no arguments only when a token is set.
	"""
	log = log_fn or (lambda message: None)
	user = (flag_value or "").strip()
	if user:
		log(f"User identified as {user} via flag")
		return user
	user = get_env_str(environ, USERNAME_ENV_NAME)
	if user:
		log(f"User identified as {user} via environment variable")
		return user
	if not token:
		raise ConfigError(
			"GitHub user not provided via -user flag or "
			+ f"${USERNAME_ENV_NAME}, and no access token to detect it from"
		)
	log("User not specified via flag or environment variable, attempting to detect from access token.")
	login = (lookup_login() or "").strip()
	if not login:
		raise ConfigError("failed to identify user")
	log(f"User identified as {login}")
	return login


#============================================
def build_run_config(args, token: str, user: str) -> RunConfig:
	"""
	Build the immutable run configuration from parsed flags plus resolved identity.
	"""
	weeks_back = getattr(args, "weeks_back", DEFAULT_WEEKS_BACK)
	try:
		weeks_back = int(weeks_back)
	except (TypeError, ValueError) as error:
		raise ConfigError(f"Invalid integer for -weeks_back: {weeks_back!r}") from error
	config = RunConfig(
		user=user,
		token=token,
		start_date=(getattr(args, "start_date", "") or "").strip(),
		end_date=(getattr(args, "end_date", "") or "").strip(),
		start_of_week=(getattr(args, "start_of_week", "") or DEFAULT_START_OF_WEEK).strip(),
		weeks_back=weeks_back,
	)
	return config
