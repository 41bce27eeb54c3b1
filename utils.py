import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TRUTHY = ("true", "yes", "y", "1")

ISO_PATTERN = re.compile(
	r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[ T](\d{1,2})(?::(\d{1,2})(?::(\d{1,2}))?)?)?$"
)
SLASH_PATTERN = re.compile(
	r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:[ T](\d{1,2})(?::(\d{1,2})(?::(\d{1,2}))?)?)?$"
)
DEFAULT_HOUR = 12


def trim(value: Any) -> str:
	if value is None:
		return ""
	return str(value).strip()

def is_yes(value: Any) -> bool:
	return trim(value).lower() in TRUTHY

def norm_key(key: Any) -> str:
	"""Lowercase a header and drop everything but letters and digits."""
	return re.sub(r"[^a-z0-9]", "", trim(key).lower())

def normalize_row(row: Mapping[str, Any] | None) -> dict[str, Any]:
	return {norm_key(k): v for k, v in (row or {}).items()}

def first_value(row: Mapping[str, Any], fields: Iterable[str]) -> str:
	"""Return the first non-blank value among `fields` in a normalized row."""
	for name in fields:
		value = trim(row.get(norm_key(name)))
		if value:
			return value
	return ""

def positional(row: Mapping[str, Any] | None, index: int) -> str:
	values = list((row or {}).values())
	if index < len(values):
		return trim(values[index])
	return ""

def slugify(name: str) -> str:
	return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def _build(year: int, month: int, day: int, hour: str | None, minute: str | None, second: str | None) -> datetime | None:
	try:
		return datetime(
			year,
			month,
			day,
			int(hour) if hour is not None else DEFAULT_HOUR,
			int(minute or 0),
			int(second or 0),
			tzinfo=timezone.utc,
		)
	except ValueError:
		return None

def parse_datetime_utc(text: Any) -> datetime | None:
	"""Parse a sheet date/datetime as UTC.

	Accepts ISO dates (2025-08-22, 2025-08-22 19:45[:05]) and slash dates
	(M/D/YYYY or D/M/YYYY, optional time). Slash dates are read month-first
	unless the first part is above 12; when both parts are 12 or less the
	reading is ambiguous and month-first wins. Dates without a time land on
	12:00:00 UTC so they never drift across a day boundary.
	"""
	value = trim(text)
	if not value:
		return None

	match = ISO_PATTERN.match(value)
	if match:
		year, month, day, hour, minute, second = match.groups()
		return _build(int(year), int(month), int(day), hour, minute, second)

	match = SLASH_PATTERN.match(value)
	if match:
		first, second_part, year, hour, minute, second = match.groups()
		a, b = int(first), int(second_part)
		month, day = (b, a) if a > 12 else (a, b)
		return _build(int(year), month, day, hour, minute, second)

	return None

def epoch_millis(value: datetime | None) -> int:
	if value is None:
		return 0
	return int((value - EPOCH) / timedelta(milliseconds=1))

def recency_cutoff(now: datetime, window_days: int) -> datetime:
	"""Start (UTC midnight) of the day `window_days` days before `now`.

	Flooring to midnight makes a zero window cover the whole current day;
	the cutoff is not the exact instant `now - window_days`.
	"""
	day = now.astimezone(timezone.utc) - timedelta(days=window_days)
	return day.replace(hour=0, minute=0, second=0, microsecond=0)

def isoformat(value: datetime | None) -> str | None:
	if value is None:
		return None
	return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
