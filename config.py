"""Ladder settings: weight groups, arms, sheet locations and column synonyms."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

# Light to heavy, ending in the unbounded Open group.
ORDER_GROUPS: tuple[str, ...] = ("u60kg", "u75kg", "u85kg", "Open")
ARMS: tuple[str, ...] = ("Right", "Left")
LIGHTEST_SYNONYMS: tuple[str, ...] = ("women",)

DEFAULT_WINDOW_DAYS = 30
LIVE_POLL_SECONDS = 2.0
LIVE_TICKS = 30
API_TIMEOUT_SECONDS = 12

OPEN_DISPLAY_LIMIT = 15
DISPLAY_LIMIT = 10

CLUB_NAME = "NUAC Armwrestling Club"

PLAYERS_SHEET = {"id": "1oKakYJ_L4kpgw2FrPgRxaZHqa5BKgYXP5drXJ5bAuHw", "gid": "1561293575"}
MATCHES_SHEET = {"id": "16NFals1k03ibhtokiG9HzRe207mpKovxjLRNscDq1KI", "gid": "573157689"}

# Column names to check for each field (in order of preference).
PLAYER_ID_FIELDS = ["id", "player id", "player_id"]
PLAYER_NAME_FIELDS = ["name", "display name", "display_name"]
PLAYER_CLASS_FIELDS = ["weight class", "weight_class"]
PLAYER_ACTIVE_FIELDS = ["active", "currently active?", "currently active"]
PLAYER_RANK_FIELDS = ["starting rank", "current_rank"]

MATCH_DATE_FIELDS = ["date"]
MATCH_TIME_FIELDS = ["time", "timestamp", "datetime"]
MATCH_SEQUENCE_FIELDS = ["seq", "order", "sequence"]
MATCH_CLASS_FIELDS = ["weight class", "weight_class"]
MATCH_WINNER_FIELDS = ["winner id", "winner_id"]
MATCH_LOSER_FIELDS = ["loser id", "loser_id", "looser id", "looser_id"]
MATCH_ARM_FIELDS = ["arm?", "arm"]
MATCH_BADGE_FIELDS = ["badge?", "badge"]


def display_classes(weight_groups: tuple[str, ...] = ORDER_GROUPS, arms: tuple[str, ...] = ARMS) -> list[str]:
	"""Ladder labels in display order: Open first, then heavy to light."""
	open_group = weight_groups[-1]
	labels = [f"{open_group} {arm}" for arm in arms]
	for group in reversed(weight_groups[:-1]):
		labels.extend(f"{group} {arm}" for arm in arms)
	return labels


def display_limit(label: str, weight_groups: tuple[str, ...] = ORDER_GROUPS) -> int:
	open_group = weight_groups[-1]
	return OPEN_DISPLAY_LIMIT if label.startswith(f"{open_group} ") else DISPLAY_LIMIT


def pretty_label(label: str, weight_groups: tuple[str, ...] = ORDER_GROUPS) -> str:
	lightest = weight_groups[0]
	if label.lower().startswith(lightest.lower() + " "):
		return f"Women and Men {lightest}{label[len(lightest):]}"
	return label


@dataclass(frozen=True)
class LadderConfig:
	weight_groups: tuple[str, ...] = ORDER_GROUPS
	arms: tuple[str, ...] = ARMS
	lightest_synonyms: tuple[str, ...] = LIGHTEST_SYNONYMS
	window_days: int = DEFAULT_WINDOW_DAYS
	show_badges: bool = True
	players_sheet: Mapping[str, str] = field(default_factory=lambda: dict(PLAYERS_SHEET))
	matches_sheet: Mapping[str, str] = field(default_factory=lambda: dict(MATCHES_SHEET))

	def __post_init__(self) -> None:
		if self.window_days < 0:
			raise ValueError(f"window_days must be non-negative, got {self.window_days}")
		if not self.weight_groups:
			raise ValueError("At least one weight group is required.")
		if sorted(self.arms) != ["Left", "Right"]:
			raise ValueError(f"Arms must be exactly Left and Right, got {list(self.arms)}")


def _sheet(value: Any, default: Mapping[str, str], name: str) -> Mapping[str, str]:
	if value is None:
		return default
	if not isinstance(value, dict) or not value.get("id") or not value.get("gid"):
		raise ValueError(f"sheets.{name} must be an object with 'id' and 'gid'.")
	return {"id": str(value["id"]), "gid": str(value["gid"])}


def load_config(path: Path | None, **overrides: Any) -> tuple[LadderConfig, list[str]]:
	"""Build settings from an optional JSON file plus CLI overrides.

	Returns the config and a list of warnings for the caller to report.
	Keyword overrides that are None are ignored.
	"""
	warnings: list[str] = []
	data: dict[str, Any] = {}
	if path is not None:
		if not path.exists():
			warnings.append(f"Settings file not found: {path}; using defaults.")
		else:
			with path.open("r", encoding="utf-8") as fh:
				loaded = json.load(fh)
			if not isinstance(loaded, dict):
				raise ValueError(f"Settings file {path} must contain a JSON object.")
			data = loaded

	sheets = data.get("sheets") or {}
	if not isinstance(sheets, dict):
		raise ValueError("'sheets' must be a JSON object.")

	show_badges = data.get("showBadges", True)
	if not isinstance(show_badges, bool):
		raise ValueError("'showBadges' must be true or false.")

	window_days = data.get("windowDays", DEFAULT_WINDOW_DAYS)
	if not isinstance(window_days, int) or isinstance(window_days, bool) or window_days < 0:
		raise ValueError("'windowDays' must be a non-negative integer.")

	values: dict[str, Any] = {
		"window_days": window_days,
		"show_badges": show_badges,
		"players_sheet": _sheet(sheets.get("players"), PLAYERS_SHEET, "players"),
		"matches_sheet": _sheet(sheets.get("matches"), MATCHES_SHEET, "matches"),
	}
	groups = data.get("weightGroups")
	if groups is not None:
		if not isinstance(groups, list) or not all(isinstance(g, str) for g in groups):
			raise ValueError("'weightGroups' must be a list of strings.")
		values["weight_groups"] = tuple(groups)

	for key, value in overrides.items():
		if value is not None:
			values[key] = value

	return LadderConfig(**values), warnings
