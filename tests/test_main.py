"""
Tests for the command-line entry point, JSON payload and live polling.
"""

import json
from datetime import datetime, timezone

import pytest
import requests

import main
from config import LadderConfig
from ladder import compose_snapshots

NOW = datetime(2025, 8, 22, 15, 0, tzinfo=timezone.utc)

PLAYERS_CSV = """Player ID,Display Name,Weight Class,Active,Starting Rank
alice,Alice,u60kg,yes,1
bob,Bob,women,yes,2
cara,Cara,u60kg,yes,3
dan,Dan,u85kg,no,1
"""

MATCHES_CSV = """Date,Time,Seq,Weight Class,Winner ID,Loser ID,Arm?,Badge?
2025-06-01,,,u60kg,cara,alice,Right,
2025-08-20,18:30,,u60kg,bob,alice,R,
2025-08-21,,,Open,alice,cara,Left,FALSE
2025-08-21,,,Open,alice,cara,,
"""


def write_inputs(tmp_path):
	players = tmp_path / "players.csv"
	matches = tmp_path / "matches.csv"
	players.write_text(PLAYERS_CSV, encoding="utf-8")
	matches.write_text(MATCHES_CSV, encoding="utf-8")
	return players, matches


class TestBuildPayload:
	"""Output handed to a renderer"""

	def test_payload_shape(self, trio, make_match):
		matches = [
			make_match("cara", "alice", when=datetime(2025, 6, 1, 12, tzinfo=timezone.utc)),
			make_match("bob", "alice", when=datetime(2025, 8, 20, 12, tzinfo=timezone.utc)),
		]
		dual = compose_snapshots(trio, matches, LadderConfig(), now=NOW)
		payload = main.build_payload(dual, LadderConfig(), generated_at=NOW)

		assert payload["generatedAt"] == "2025-08-22T15:00:00Z"
		assert payload["cutoff"] == "2025-07-23T00:00:00Z"
		assert payload["windowDays"] == 30
		assert payload["showBadges"] is True
		assert list(payload["ladders"])[0] == "Open Right"

		rows = payload["ladders"]["u60kg Right"]
		assert [row["id"] for row in rows] == ["cara", "bob", "alice"]
		assert rows[1] == {
			"id": "bob",
			"name": "Bob",
			"baseClass": "u60kg",
			"rank": 2,
			"wasRank": 3,
			"delta": 1,
			"badge": {"kind": "takeover", "up": 1},
		}
		assert payload["lastEventMap"]["u60kg Right:bob"] == {
			"type": "takeover",
			"when": "2025-08-20T12:00:00Z",
			"jump": 1,
		}
		assert payload["lastJumpMap"]["u60kg Right:bob"] == 1
		assert "u60kg Right:alice" not in payload["lastJumpMap"]
		json.dumps(payload)


class TestMain:
	"""End-to-end runs against local CSV files"""

	def test_json_out(self, tmp_path):
		players, matches = write_inputs(tmp_path)
		out = tmp_path / "out" / "standings.json"
		code = main.main([
			"--players-csv", str(players),
			"--matches-csv", str(matches),
			"--as-of", "2025-08-22",
			"--json-out", str(out),
		])
		assert code == 0
		payload = json.loads(out.read_text(encoding="utf-8"))
		assert [row["id"] for row in payload["ladders"]["u60kg Right"]] == ["cara", "bob", "alice"]
		# Badge-suppressed defense still counts for ordering but leaves no event.
		assert [row["id"] for row in payload["ladders"]["Open Left"]] == ["alice", "bob", "cara"]
		assert "Open Left:alice" not in payload["lastEventMap"]
		# Inactive competitors never appear.
		assert all(row["id"] != "dan" for rows in payload["ladders"].values() for row in rows)

	def test_no_badges_flag(self, tmp_path):
		players, matches = write_inputs(tmp_path)
		out = tmp_path / "standings.json"
		code = main.main([
			"--players-csv", str(players),
			"--matches-csv", str(matches),
			"--no-badges",
			"--json-out", str(out),
		])
		assert code == 0
		payload = json.loads(out.read_text(encoding="utf-8"))
		assert payload["cutoff"] is None
		assert payload["showBadges"] is False
		for rows in payload["ladders"].values():
			for row in rows:
				assert row["delta"] == 0
				assert row["badge"] is None

	def test_prints_tables(self, tmp_path, capsys):
		players, matches = write_inputs(tmp_path)
		code = main.main(["--players-csv", str(players), "--matches-csv", str(matches), "--as-of", "2025-08-22"])
		assert code == 0
		output = capsys.readouterr().out
		assert "Women and Men u60kg Right" in output
		assert "Skipped 1 match rows without an arm" in output

	def test_missing_csv_fails(self, tmp_path):
		code = main.main(["--players-csv", str(tmp_path / "nope.csv"), "--matches-csv", str(tmp_path / "nope2.csv")])
		assert code == 1

	def test_bad_settings_fail(self, tmp_path):
		settings = tmp_path / "settings.json"
		settings.write_text("[]", encoding="utf-8")
		assert main.main(["--config", str(settings)]) == 1

	def test_negative_window_fails(self):
		assert main.main(["--window-days", "-2"]) == 1

	def test_bad_as_of_fails(self):
		assert main.main(["--as-of", "someday"]) == 1

	def test_null_window_in_settings_fails(self, tmp_path):
		settings = tmp_path / "settings.json"
		settings.write_text(json.dumps({"windowDays": None}), encoding="utf-8")
		assert main.main(["--config", str(settings)]) == 1

	@pytest.mark.parametrize("limit", ["0", "-1", "two"])
	def test_limit_must_be_positive(self, limit):
		with pytest.raises(SystemExit) as excinfo:
			main.parse_args(["--limit", limit])
		assert excinfo.value.code == 2

	def test_limit_accepted(self):
		assert main.parse_args(["--limit", "3"]).limit == 3

	def test_titles_follow_configured_groups(self, tmp_path, capsys):
		_, matches = write_inputs(tmp_path)
		players = tmp_path / "light.csv"
		players.write_text(
			"Player ID,Display Name,Weight Class,Active,Starting Rank\n"
			"bob,Roberta Featherstonehaugh-Whitley,women,yes,1\n",
			encoding="utf-8",
		)
		settings = tmp_path / "settings.json"
		settings.write_text(json.dumps({"weightGroups": ["women", "Open"]}), encoding="utf-8")
		code = main.main([
			"--players-csv", str(players),
			"--matches-csv", str(matches),
			"--config", str(settings),
			"--as-of", "2025-08-22",
		])
		assert code == 0
		output = capsys.readouterr().out
		assert "Women and Men women Right" in output
		assert "Women and Men u60kg" not in output


class TestPoll:
	"""Live refresh loop"""

	def test_runs_every_tick_and_survives_failures(self):
		sleeps = []
		calls = []

		def step():
			calls.append(len(calls))
			if len(calls) == 2:
				raise requests.ConnectionError("offline")

		succeeded = main.poll(step, 2.0, 3, sleep=sleeps.append)
		assert calls == [0, 1, 2]
		assert succeeded == 2
		assert sleeps == [2.0, 2.0]

	def test_zero_ticks(self):
		assert main.poll(lambda: None, 1.0, 0, sleep=lambda _: None) == 0
