"""Turn raw sheet rows into Competitor and MatchRecord values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import config
import utils
from api_types import SheetRow
from ladder import Competitor, MatchRecord


@dataclass
class MatchLoad:
	matches: list[MatchRecord] = field(default_factory=list)
	dropped_without_arm: int = 0


def parse_integer(text: str) -> int | None:
	try:
		value = float(text)
	except ValueError:
		return None
	if not value.is_integer():
		return None
	return int(value)


def parse_seed_rank(text: str) -> int | None:
	value = parse_integer(text)
	if value is None or value <= 0:
		return None
	return value


def parse_arm(text: str) -> str:
	value = utils.trim(text).lower()
	if value.startswith("l"):
		return "Left"
	if value.startswith("r"):
		return "Right"
	return ""


def badge_suppressed(text: str) -> bool:
	"""Only an explicit non-truthy badge value turns events off."""
	return text != "" and not utils.is_yes(text)


def competitor_from_row(raw: SheetRow, index: int) -> Competitor:
	row = utils.normalize_row(raw)
	raw_id = utils.first_value(row, config.PLAYER_ID_FIELDS)
	name = utils.first_value(row, config.PLAYER_NAME_FIELDS)
	weight_class = utils.first_value(row, config.PLAYER_CLASS_FIELDS)
	active = utils.first_value(row, config.PLAYER_ACTIVE_FIELDS) or "true"
	rank = utils.first_value(row, config.PLAYER_RANK_FIELDS)

	if not raw_id and not name and not weight_class:
		raw_id = utils.positional(raw, 0)
		name = utils.positional(raw, 1) or raw_id
		weight_class = utils.positional(raw, 2)
		active = utils.positional(raw, 3) if len(raw) > 3 else "true"
		rank = utils.positional(raw, 4)

	safe_id = raw_id or (utils.slugify(name) if name else "") or f"anon_{index}"
	return Competitor(
		id=safe_id,
		name=name or safe_id,
		base_class=weight_class,
		active=utils.is_yes(active),
		seed_rank=parse_seed_rank(rank),
	)


def match_from_row(raw: SheetRow, row_index: int) -> MatchRecord:
	row = utils.normalize_row(raw)
	date = utils.first_value(row, config.MATCH_DATE_FIELDS)
	time = utils.first_value(row, config.MATCH_TIME_FIELDS)
	sequence = utils.first_value(row, config.MATCH_SEQUENCE_FIELDS)
	weight_class = utils.first_value(row, config.MATCH_CLASS_FIELDS)
	winner = utils.first_value(row, config.MATCH_WINNER_FIELDS)
	loser = utils.first_value(row, config.MATCH_LOSER_FIELDS)
	arm = utils.first_value(row, config.MATCH_ARM_FIELDS)
	badge = utils.first_value(row, config.MATCH_BADGE_FIELDS)

	if not date and not winner and not loser:
		date = utils.positional(raw, 0)
		weight_class = utils.positional(raw, 1)
		winner = utils.positional(raw, 2)
		loser = utils.positional(raw, 3)
		arm = utils.positional(raw, 4)

	stamp = f"{date} {time}" if time else date
	return MatchRecord(
		winner_id=winner,
		loser_id=loser,
		arm=parse_arm(arm),
		timestamp=utils.parse_datetime_utc(stamp),
		sequence=parse_integer(sequence) if sequence else None,
		weight_class=weight_class,
		row_index=row_index,
		badge_suppressed=badge_suppressed(badge),
	)


def load_competitors(rows: Iterable[SheetRow]) -> list[Competitor]:
	return [competitor_from_row(raw, idx) for idx, raw in enumerate(rows)]


def load_matches(rows: Iterable[SheetRow]) -> MatchLoad:
	result = MatchLoad()
	for row_index, raw in enumerate(rows):
		match = match_from_row(raw, row_index)
		if not match.arm:
			result.dropped_without_arm += 1
			continue
		result.matches.append(match)
	return result
