"""Challenge ladders for every weight group and arm, rebuilt by replaying matches in order."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Mapping, Sequence

import utils
from config import LadderConfig


DEFENSE = "defense"
TAKEOVER = "takeover"
LOST = "lost"


@dataclass(frozen=True)
class Competitor:
	id: str
	name: str
	base_class: str
	active: bool = True
	seed_rank: int | None = None


@dataclass(frozen=True)
class MatchRecord:
	winner_id: str
	loser_id: str
	arm: str
	timestamp: datetime | None = None
	sequence: int | None = None
	weight_class: str = ""
	row_index: int = 0
	badge_suppressed: bool = False

	@property
	def when(self) -> datetime:
		return self.timestamp or utils.EPOCH

	@property
	def stable_key(self) -> tuple[int, str, str, str, str]:
		"""Final tie-break: input row first, then participants, arm and class label."""
		return (self.row_index, self.winner_id, self.loser_id, self.arm, self.weight_class)


@dataclass(frozen=True, order=True)
class LadderKey:
	weight_group: str
	arm: str

	@property
	def label(self) -> str:
		return f"{self.weight_group} {self.arm}"

	def __str__(self) -> str:
		return self.label


@dataclass(frozen=True)
class LadderEvent:
	ladder: LadderKey
	competitor_id: str
	type: str
	when: datetime
	jump: int = 0


@dataclass(frozen=True)
class StandingEntry:
	id: str
	name: str
	base_class: str
	rank: int


@dataclass(frozen=True)
class ChallengeResult:
	order: tuple[str, ...]
	outcome: str
	jump: int


@dataclass(frozen=True)
class SeededLadders:
	order: Mapping[LadderKey, tuple[str, ...]]
	competitors: Mapping[str, Competitor]


@dataclass(frozen=True)
class Snapshot:
	ladders: Mapping[LadderKey, tuple[StandingEntry, ...]]
	last_events: Mapping[str, LadderEvent]
	last_jumps: Mapping[str, int]
	cutoff: datetime | None = None

	def order(self, ladder: LadderKey) -> list[str]:
		return [entry.id for entry in self.ladders.get(ladder, ())]

	def last_event(self, ladder: LadderKey, competitor_id: str) -> LadderEvent | None:
		return self.last_events.get(event_key(ladder, competitor_id))

	def last_jump(self, ladder: LadderKey, competitor_id: str) -> int:
		return self.last_jumps.get(event_key(ladder, competitor_id), 0)


@dataclass(frozen=True)
class DualSnapshot:
	now: Snapshot
	past: Snapshot
	cutoff: datetime | None
	show_badges: bool
	window_days: int


def event_key(ladder: LadderKey, competitor_id: str) -> str:
	return f"{ladder.label}:{competitor_id}"


def ladder_keys(config: LadderConfig) -> list[LadderKey]:
	return [LadderKey(group, arm) for group in config.weight_groups for arm in config.arms]


def base_group_index(base_class: str, config: LadderConfig) -> int | None:
	raw = utils.trim(base_class).lower()
	if not raw:
		return None
	if raw in (s.lower() for s in config.lightest_synonyms):
		return 0
	for idx, group in enumerate(config.weight_groups):
		if group.lower() == raw:
			return idx
	return None


def eligible_ladders(base_class: str, config: LadderConfig | None = None) -> frozenset[LadderKey]:
	"""Every ladder at or above the competitor's base group, on both arms."""
	config = config or LadderConfig()
	idx = base_group_index(base_class, config)
	if idx is None:
		return frozenset()
	return frozenset(
		LadderKey(group, arm)
		for group in config.weight_groups[idx:]
		for arm in config.arms
	)


def seed_sort_key(competitor: Competitor) -> tuple[float, str, str, str]:
	rank = competitor.seed_rank if competitor.seed_rank is not None else math.inf
	return (rank, competitor.name.casefold(), competitor.name, competitor.id)


def seed_ladders(competitors: Iterable[Competitor], config: LadderConfig | None = None) -> SeededLadders:
	config = config or LadderConfig()
	members: dict[LadderKey, list[Competitor]] = {key: [] for key in ladder_keys(config)}
	by_id: dict[str, Competitor] = {}

	for competitor in competitors:
		if not competitor.active or competitor.id in by_id:
			continue
		by_id[competitor.id] = competitor
		for key in eligible_ladders(competitor.base_class, config):
			members[key].append(competitor)

	order = {
		key: tuple(c.id for c in sorted(group, key=seed_sort_key))
		for key, group in members.items()
	}
	return SeededLadders(order=order, competitors=by_id)


def timeline_key(match: MatchRecord) -> tuple:
	sequence = match.sequence if match.sequence is not None else math.inf
	return (utils.epoch_millis(match.timestamp), sequence, *match.stable_key)


def sort_timeline(matches: Iterable[MatchRecord]) -> list[MatchRecord]:
	"""Drop matches without an arm and order the rest deterministically."""
	return sorted((m for m in matches if m.arm), key=timeline_key)


def apply_challenge(order: Sequence[str], winner_id: str, loser_id: str) -> ChallengeResult | None:
	"""Apply one result to a ladder order.

	Returns None when either competitor is not on the ladder. A higher-ranked
	winner defends without reordering; a lower-ranked winner takes the
	loser's slot and everyone in between slides down one place.
	"""
	current = tuple(order)
	try:
		wi = current.index(winner_id)
		li = current.index(loser_id)
	except ValueError:
		return None

	if wi < li:
		return ChallengeResult(order=current, outcome=DEFENSE, jump=0)
	if wi == li:
		return None

	without = current[:wi] + current[wi + 1:]
	moved = without[:li] + (winner_id,) + without[li:]
	return ChallengeResult(order=moved, outcome=TAKEOVER, jump=wi - li)


def replay(seeded: SeededLadders, timeline: Sequence[MatchRecord], cutoff: datetime | None = None) -> Snapshot:
	ladders: dict[LadderKey, tuple[str, ...]] = dict(seeded.order)
	last_events: dict[str, LadderEvent] = {}
	last_jumps: dict[str, int] = {}

	by_arm: dict[str, list[LadderKey]] = {}
	for key in ladders:
		by_arm.setdefault(key.arm, []).append(key)

	for match in timeline:
		if not match.arm:
			continue
		when = match.when
		if cutoff is not None and when > cutoff:
			continue

		for key in by_arm.get(match.arm, []):
			result = apply_challenge(ladders[key], match.winner_id, match.loser_id)
			if result is None:
				continue
			ladders[key] = result.order

			if match.badge_suppressed:
				continue

			winner_key = event_key(key, match.winner_id)
			loser_key = event_key(key, match.loser_id)
			last_events[winner_key] = LadderEvent(key, match.winner_id, result.outcome, when, result.jump)
			if result.outcome == TAKEOVER:
				last_jumps[winner_key] = result.jump
			else:
				last_jumps.pop(winner_key, None)
			last_events[loser_key] = LadderEvent(key, match.loser_id, LOST, when)
			last_jumps.pop(loser_key, None)

	standings = {
		key: tuple(
			StandingEntry(
				id=competitor_id,
				name=seeded.competitors[competitor_id].name,
				base_class=seeded.competitors[competitor_id].base_class,
				rank=idx,
			)
			for idx, competitor_id in enumerate(order, start=1)
		)
		for key, order in ladders.items()
	}
	return Snapshot(ladders=standings, last_events=last_events, last_jumps=last_jumps, cutoff=cutoff)


def compose_snapshots(
	competitors: Iterable[Competitor],
	matches: Iterable[MatchRecord],
	config: LadderConfig | None = None,
	now: datetime | None = None,
) -> DualSnapshot:
	"""Replay everything ("now") and up to the recency cutoff ("past").

	With recency display off there is no cutoff and both replays cover the
	full history, so every delta is zero and no badge shows.
	"""
	config = config or LadderConfig()
	seeded = seed_ladders(competitors, config)
	timeline = sort_timeline(matches)

	cutoff = None
	if config.show_badges:
		cutoff = utils.recency_cutoff(now or datetime.now(timezone.utc), config.window_days)

	return DualSnapshot(
		now=replay(seeded, timeline),
		past=replay(seeded, timeline, cutoff),
		cutoff=cutoff,
		show_badges=config.show_badges,
		window_days=config.window_days,
	)
