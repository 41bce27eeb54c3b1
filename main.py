"""Build challenge-ladder standings from the club sheets and print them."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping, Sequence

import requests
from rich.console import Console
from rich.progress import (
	BarColumn,
	Progress,
	SpinnerColumn,
	TextColumn,
	TimeElapsedColumn,
)
from rich.table import Table

import badges
import config
import downloader
import records
import utils
from api_types import BadgePayload, LadderPayload, LadderRowPayload, SheetRow
from config import LadderConfig
from ladder import DEFENSE, TAKEOVER, Competitor, DualSnapshot, MatchRecord, compose_snapshots

console = Console()

GREEN = "#22c55e"
GOLD = "#f5c542"
LOAD_ERRORS = (requests.RequestException, FileNotFoundError, ValueError)


@dataclass
class Inputs:
	competitors: list[Competitor]
	matches: list[MatchRecord]
	dropped_without_arm: int = 0


def positive_int(value: str) -> int:
	try:
		number = int(value)
	except ValueError:
		raise argparse.ArgumentTypeError(f"expected a whole number, got {value!r}")
	if number < 1:
		raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
	return number


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="Replay club matches and print challenge-ladder standings.")
	parser.add_argument(
		"--players-csv",
		type=Path,
		help="Read competitors from a local CSV instead of the players sheet.",
	)
	parser.add_argument(
		"--matches-csv",
		type=Path,
		help="Read matches from a local CSV instead of the matches sheet.",
	)
	parser.add_argument(
		"--config",
		type=Path,
		help="Optional JSON settings file (windowDays, showBadges, weightGroups, sheets).",
	)
	parser.add_argument(
		"--window-days",
		type=int,
		help=f"Recent-activity window in days. Defaults to {config.DEFAULT_WINDOW_DAYS}.",
	)
	parser.add_argument(
		"--no-badges",
		action="store_true",
		help="Hide recent-activity badges and movement.",
	)
	parser.add_argument(
		"--as-of",
		help="Treat this date (YYYY-MM-DD) as today when computing the recent window.",
	)
	group = parser.add_mutually_exclusive_group()
	group.add_argument(
		"--limit",
		type=positive_int,
		help="How many competitors to show per ladder. Default is 15 for Open, 10 otherwise.",
	)
	group.add_argument(
		"--all",
		action="store_true",
		help="Show every competitor on every ladder.",
	)
	parser.add_argument(
		"--json-out",
		type=Path,
		help="Optional path to write the standings JSON payload.",
	)
	parser.add_argument(
		"--live",
		action="store_true",
		help="Keep refreshing for a while instead of printing once.",
	)
	parser.add_argument(
		"--poll-seconds",
		type=float,
		default=config.LIVE_POLL_SECONDS,
		help="Seconds between refreshes in live mode.",
	)
	parser.add_argument(
		"--ticks",
		type=int,
		default=config.LIVE_TICKS,
		help="Number of refreshes in live mode.",
	)
	return parser.parse_args(argv)


def parse_as_of(value: str | None) -> datetime | None:
	if value is None:
		return None
	parsed = utils.parse_datetime_utc(value)
	if parsed is None:
		raise ValueError(f"Could not parse --as-of date: {value}")
	return parsed


def read_source(path: Path | None, sheet: Mapping[str, str]) -> list[SheetRow]:
	if path is not None:
		return downloader.read_rows(path)
	return downloader.fetch_sheet(sheet)


def load_inputs(args: argparse.Namespace, settings: LadderConfig) -> Inputs:
	with Progress(
		SpinnerColumn(),
		TextColumn("{task.description}"),
		BarColumn(bar_width=None),
		TextColumn("{task.completed}/{task.total}"),
		TimeElapsedColumn(),
		console=console,
		transient=True,
	) as progress:
		task = progress.add_task("Loading players", total=2)
		player_rows = read_source(args.players_csv, settings.players_sheet)
		progress.update(task, description="Loading matches")
		progress.advance(task)
		match_rows = read_source(args.matches_csv, settings.matches_sheet)
		progress.advance(task)

	loaded = records.load_matches(match_rows)
	return Inputs(
		competitors=records.load_competitors(player_rows),
		matches=loaded.matches,
		dropped_without_arm=loaded.dropped_without_arm,
	)


def badge_payload(badge: badges.Badge | None) -> BadgePayload | None:
	if badge is None:
		return None
	return {"kind": badge.kind, "up": badge.up}


def build_payload(
	dual: DualSnapshot,
	settings: LadderConfig,
	limit: int | None = None,
	full: bool = False,
	generated_at: datetime | None = None,
) -> LadderPayload:
	ladders: dict[str, list[LadderRowPayload]] = {}
	for key, rows in badges.board(dual, settings, limit=limit, full=full).items():
		ladders[key.label] = [
			{
				"id": row.id,
				"name": row.name,
				"baseClass": row.base_class,
				"rank": row.rank,
				"wasRank": row.was_rank,
				"delta": row.delta,
				"badge": badge_payload(row.badge),
			}
			for row in rows
		]

	return {
		"generatedAt": utils.isoformat(generated_at or datetime.now(timezone.utc)) or "",
		"cutoff": utils.isoformat(dual.cutoff),
		"windowDays": dual.window_days,
		"showBadges": dual.show_badges,
		"ladders": ladders,
		"lastEventMap": {
			key: {"type": event.type, "when": utils.isoformat(event.when) or "", "jump": event.jump}
			for key, event in dual.now.last_events.items()
		},
		"lastJumpMap": dict(dual.now.last_jumps),
	}


def format_name(row: badges.StandingRow) -> str:
	badge = row.badge
	if badge is None:
		return row.name
	parts = [f"[bold {GREEN}]{row.name}[/]"]
	if badge.kind == TAKEOVER:
		if badge.up:
			parts.append(f"[bold {GREEN}]↑ {badge.up}[/]")
		parts.append(f"[{GOLD}]★[/]")
	elif badge.kind == DEFENSE:
		parts.append("🛡️")
	return " ".join(parts)


def format_movement(row: badges.StandingRow) -> str:
	if row.delta is None:
		return "[dim]new[/]"
	if row.delta > 0:
		return f"[{GREEN}]+{row.delta}[/]"
	if row.delta < 0:
		return f"[red]{row.delta}[/]"
	return "[dim]–[/]"


def render(dual: DualSnapshot, settings: LadderConfig, limit: int | None = None, full: bool = False) -> None:
	console.print(f"[bold]{config.CLUB_NAME} – Rankings[/]")
	if dual.show_badges:
		console.print(
			f"[dim]Recent window: {dual.window_days} days (since {utils.isoformat(dual.cutoff)})[/]",
			highlight=False,
		)
		console.print(f"[{GOLD}]★[/] takeover   🛡️ defense   [{GREEN}]↑[/] positions gained")
	else:
		console.print("[dim]Badges hidden[/]")

	for key, rows in badges.board(dual, settings, limit=limit, full=full).items():
		title = config.pretty_label(key.label, settings.weight_groups)
		table = Table(
			title=title,
			caption=f"Champion: {rows[0].name}" if rows else "No competitors",
			title_justify="left",
		)
		table.add_column("#", justify="right", style="bold")
		table.add_column("Name")
		table.add_column("Base")
		if dual.show_badges:
			table.add_column("Move", justify="right")
		for row in rows:
			cells = [str(row.rank), format_name(row), row.base_class]
			if dual.show_badges:
				cells.append(format_movement(row))
			table.add_row(*cells)
		console.print(table)


def refresh(args: argparse.Namespace, settings: LadderConfig, now: datetime | None = None) -> DualSnapshot:
	inputs = load_inputs(args, settings)
	if inputs.dropped_without_arm:
		console.print(f"[yellow]Skipped {inputs.dropped_without_arm} match rows without an arm.")
	dual = compose_snapshots(inputs.competitors, inputs.matches, settings, now=now)

	if args.json_out:
		payload = build_payload(dual, settings, limit=args.limit, full=args.all)
		args.json_out.parent.mkdir(parents=True, exist_ok=True)
		args.json_out.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
		console.print(f"[green]Wrote standings JSON to {args.json_out}", highlight=False)
	else:
		render(dual, settings, limit=args.limit, full=args.all)
	return dual


def poll(
	step: Callable[[], object],
	interval: float,
	ticks: int,
	sleep: Callable[[float], None] = time.sleep,
) -> int:
	"""Run `step` every `interval` seconds, `ticks` times.

	A failed refresh is reported and the next tick still runs. Returns the
	number of successful refreshes.
	"""
	succeeded = 0
	for tick in range(ticks):
		if tick:
			sleep(interval)
		try:
			step()
		except LOAD_ERRORS as exc:
			console.print(f"[red]Refresh {tick + 1}/{ticks} failed: {exc}")
			continue
		succeeded += 1
	return succeeded


def main(argv: Sequence[str] | None = None) -> int:
	args = parse_args(argv)
	try:
		settings, warnings = config.load_config(
			args.config,
			window_days=args.window_days,
			show_badges=False if args.no_badges else None,
		)
		now = parse_as_of(args.as_of)
	except ValueError as exc:
		console.print(f"[red]{exc}")
		return 1
	for warning in warnings:
		console.print(f"[yellow]{warning}")

	if args.live:
		def _step() -> None:
			console.rule(f"Refreshed {datetime.now().strftime('%H:%M:%S')}")
			refresh(args, settings, now)

		poll(_step, args.poll_seconds, args.ticks)
		return 0

	try:
		refresh(args, settings, now)
	except LOAD_ERRORS as exc:
		console.print(f"[red]{exc}")
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
