"""Recent-activity badges and display rows for each ladder."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import config
from config import LadderConfig
from ladder import DEFENSE, TAKEOVER, DualSnapshot, LadderEvent, LadderKey, ladder_keys


@dataclass(frozen=True)
class Badge:
	kind: str
	up: int | None = None


@dataclass(frozen=True)
class StandingRow:
	id: str
	name: str
	base_class: str
	rank: int
	was_rank: int | None
	delta: int | None
	badge: Badge | None


def rank_delta(was_rank: int | None, rank: int) -> int | None:
	"""Places gained since the past snapshot (positive = moved up)."""
	if was_rank is None:
		return None
	return was_rank - rank


def evaluate_badge(
	event: LadderEvent | None,
	jump: int,
	delta: int | None,
	cutoff: datetime | None,
	show_badges: bool,
) -> Badge | None:
	if not show_badges or event is None:
		return None
	if cutoff is not None and event.when < cutoff:
		return None

	if event.type == TAKEOVER:
		if jump > 0:
			up = jump
		elif delta is not None and delta > 0:
			up = delta
		else:
			up = None
		return Badge(kind=TAKEOVER, up=up)
	if event.type == DEFENSE:
		return Badge(kind=DEFENSE)
	return None


def standings(dual: DualSnapshot, ladder: LadderKey, limit: int | None = None) -> list[StandingRow]:
	if limit is not None and limit < 1:
		raise ValueError(f"limit must be at least 1, got {limit}")
	entries = dual.now.ladders.get(ladder, ())
	if limit is not None:
		entries = entries[:limit]

	past_ranks = {entry.id: entry.rank for entry in dual.past.ladders.get(ladder, ())}
	rows: list[StandingRow] = []
	for entry in entries:
		was_rank = past_ranks.get(entry.id)
		delta = rank_delta(was_rank, entry.rank)
		badge = evaluate_badge(
			dual.now.last_event(ladder, entry.id),
			dual.now.last_jump(ladder, entry.id),
			delta,
			dual.cutoff,
			dual.show_badges,
		)
		rows.append(
			StandingRow(
				id=entry.id,
				name=entry.name,
				base_class=entry.base_class,
				rank=entry.rank,
				was_rank=was_rank,
				delta=delta,
				badge=badge,
			)
		)
	return rows


def display_order(settings: LadderConfig) -> list[LadderKey]:
	keys = {key.label: key for key in ladder_keys(settings)}
	return [keys[label] for label in config.display_classes(settings.weight_groups, settings.arms)]


def board(
	dual: DualSnapshot,
	settings: LadderConfig,
	limit: int | None = None,
	full: bool = False,
) -> dict[LadderKey, list[StandingRow]]:
	"""Standings for every ladder in display order.

	Without an explicit `limit` each ladder is cut to its default display
	size; `full` shows every competitor.
	"""
	result: dict[LadderKey, list[StandingRow]] = {}
	for key in display_order(settings):
		if full:
			cap = None
		elif limit is not None:
			cap = limit
		else:
			cap = config.display_limit(key.label, settings.weight_groups)
		result[key] = standings(dual, key, cap)
	return result
