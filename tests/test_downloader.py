"""
Tests for fetching sheet CSV exports and reading local CSV files.
"""

import pytest
import requests

import downloader


class FakeResponse:
	def __init__(self, text, status_code=200):
		self.text = text
		self.status_code = status_code
		self.encoding = None

	def raise_for_status(self):
		if self.status_code >= 400:
			raise requests.HTTPError(f"{self.status_code} error")


class TestUrls:
	"""Sheet export URLs"""

	def test_csv_url(self):
		url = downloader.csv_url({"id": "abc", "gid": "42"})
		assert url == "https://docs.google.com/spreadsheets/d/abc/gviz/tq?tqx=out:csv&gid=42"

	def test_cache_buster_separator(self):
		assert downloader.cache_busted("https://x/y?a=1", 123) == "https://x/y?a=1&t=123"
		assert downloader.cache_busted("https://x/y", 123) == "https://x/y?t=123"


class TestParseCsv:
	"""CSV text to row dicts"""

	def test_skips_blank_rows_and_fills_short_rows(self):
		text = "id,name,weight class\nalice,Alice,u60kg\n,,\nbob,Bob\n"
		rows = downloader.parse_csv(text)
		assert rows == [
			{"id": "alice", "name": "Alice", "weight class": "u60kg"},
			{"id": "bob", "name": "Bob", "weight class": ""},
		]

	def test_overflow_cells_dropped(self):
		rows = downloader.parse_csv("a,b\n1,2,3\n")
		assert rows == [{"a": "1", "b": "2"}]


class TestFetch:
	"""HTTP download with requests"""

	def test_fetch_rows(self, monkeypatch):
		calls = []

		def fake_get(url, headers=None, timeout=None):
			calls.append((url, headers, timeout))
			return FakeResponse("date,winner id,loser id,arm\n2025-08-22,a,b,Right\n")

		monkeypatch.setattr(downloader.requests, "get", fake_get)
		rows = downloader.fetch_rows("https://example.test/sheet.csv", timeout=5)

		assert rows == [{"date": "2025-08-22", "winner id": "a", "loser id": "b", "arm": "Right"}]
		url, headers, timeout = calls[0]
		assert url.startswith("https://example.test/sheet.csv?t=")
		assert headers == {"Cache-Control": "no-cache"}
		assert timeout == 5

	def test_http_error_propagates(self, monkeypatch):
		monkeypatch.setattr(downloader.requests, "get", lambda *a, **kw: FakeResponse("", 500))
		with pytest.raises(requests.HTTPError):
			downloader.fetch_sheet({"id": "abc", "gid": "1"})


class TestReadRows:
	"""Local CSV files"""

	def test_reads_file_with_bom(self, tmp_path):
		path = tmp_path / "players.csv"
		path.write_text("\ufeffid,name\nalice,Alice\n", encoding="utf-8")
		assert downloader.read_rows(path) == [{"id": "alice", "name": "Alice"}]

	def test_missing_file(self, tmp_path):
		with pytest.raises(FileNotFoundError):
			downloader.read_rows(tmp_path / "missing.csv")
