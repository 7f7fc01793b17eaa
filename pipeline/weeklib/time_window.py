import os
import re
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import time
from datetime import timedelta
from datetime import timezone
from datetime import tzinfo
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from weeklib.run_settings import ConfigError

WEEKDAYS = {
	"MONDAY": 0,
	"TUESDAY": 1,
	"WEDNESDAY": 2,
	"THURSDAY": 3,
	"FRIDAY": 4,
	"SATURDAY": 5,
	"SUNDAY": 6,
}
ISO_DATE_FORMAT = "%Y-%m-%d"
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


#============================================
@dataclass(frozen=True)
class TimeWindow:
	start: datetime
	end: datetime

	def __post_init__(self):
		if self.start > self.end:
			raise ConfigError(
				f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}"
			)

	#============================================
	def contains(self, moment: datetime) -> bool:
		"""
		Check a moment against the window, both bounds inclusive.
		"""
		return self.start <= moment <= self.end


#============================================
def resolve_local_timezone() -> tzinfo | None:
	"""
	Resolve local zone from TZ env; None means the system local zone.
	"""
	name = (os.environ.get("TZ", "") or "").strip()
	if not name:
		return None
	try:
		return ZoneInfo(name)
	except (ZoneInfoNotFoundError, ValueError):
		return None


#============================================
def parse_iso_date(value: str) -> datetime:
	"""
	Parse YYYY-MM-DD as midnight UTC.
	"""
	text = value.strip()
	if not ISO_DATE_RE.match(text):
		raise ConfigError(f"Invalid date {value!r}: expected YYYY-MM-DD")
	try:
		parsed = datetime.strptime(text, ISO_DATE_FORMAT)
	except ValueError as error:
		raise ConfigError(f"Invalid date {value!r}: expected YYYY-MM-DD") from error
	return parsed.replace(tzinfo=timezone.utc)


#============================================
def parse_weekday(name: str) -> int:
	"""
	Map a weekday name (any case) to datetime.weekday() numbering.
	"""
	key = (name or "").strip().upper()
	if key not in WEEKDAYS:
		raise ConfigError(f"invalid value for -start_of_week: {name!r}")
	return WEEKDAYS[key]


#============================================
def midnight_on(day: date, tz: tzinfo | None) -> datetime:
	"""
	Return midnight of a calendar day in the given zone.
	"""
	if tz is None:
		# naive local midnight; astimezone() picks the offset in effect that day
		return datetime.combine(day, time()).astimezone()
	return datetime.combine(day, time(), tzinfo=tz)


#============================================
def week_bounds(
	now: datetime,
	weeks_back: int,
	first_day: int,
	tz: tzinfo | None = None,
) -> TimeWindow:
	"""
	Compute the week that was weeks_back weeks ago (0 is the current week).

	The week starts at local midnight of the most recent first_day on or
	before the shifted moment and spans seven calendar days.
	"""
	if first_day not in WEEKDAYS.values():
		raise ConfigError(f"not a valid day: {first_day}")
	if weeks_back < 0:
		raise ConfigError(f"-weeks_back must be >= 0, got {weeks_back}")
	if now.tzinfo is None:
		now = now.replace(tzinfo=timezone.utc)
	shifted = now.astimezone(tz) - timedelta(days=7 * weeks_back)
	while shifted.weekday() != first_day:
		shifted = shifted - timedelta(days=1)
	start = midnight_on(shifted.date(), tz)
	end = midnight_on(shifted.date() + timedelta(days=7), tz)
	return TimeWindow(start=start, end=end)


#============================================
def resolve_time_window(
	start_date: str,
	end_date: str,
	start_of_week: str,
	weeks_back: int,
	now: datetime | None = None,
	tz: tzinfo | None = None,
	log_fn=None,
) -> TimeWindow:
	"""
	Resolve the report window from explicit dates or the weekly rule.
	"""
	start_text = (start_date or "").strip()
	end_text = (end_date or "").strip()
	if start_text and end_text:
		return TimeWindow(start=parse_iso_date(start_text), end=parse_iso_date(end_text))
	if (start_text or end_text) and log_fn is not None:
		log_fn("Only one of -start_date/-end_date set; skipping explicit dates and using weekly window.")
	first_day = parse_weekday(start_of_week)
	value = now or datetime.now(timezone.utc)
	return week_bounds(value, weeks_back, first_day, tz=tz)
