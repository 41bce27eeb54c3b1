import csv
import io
import time
from pathlib import Path


import requests

import config
from api_types import SheetRef, SheetRow

GVIZ_URL = "https://docs.google.com/spreadsheets/d/{id}/gviz/tq?tqx=out:csv&gid={gid}"


def csv_url(sheet: SheetRef) -> str:
	return GVIZ_URL.format(id=sheet["id"], gid=sheet["gid"])

def cache_busted(url: str, now_ms: int | None = None) -> str:
	stamp = now_ms if now_ms is not None else int(time.time() * 1000)
	separator = "&" if "?" in url else "?"
	return f"{url}{separator}t={stamp}"

def parse_csv(text: str) -> list[SheetRow]:
	reader = csv.DictReader(io.StringIO(text))
	rows: list[SheetRow] = []
	for row in reader:
		# csv puts overflow cells under a None key; keep header columns only.
		cleaned = {key: (value or "") for key, value in row.items() if key is not None}
		if not any(value.strip() for value in cleaned.values()):
			continue
		rows.append(cleaned)
	return rows

def fetch_rows(url: str, timeout: float = config.API_TIMEOUT_SECONDS) -> list[SheetRow]:
	"""Download a sheet's CSV export, bypassing any cached copy."""
	req = requests.get(cache_busted(url), headers={"Cache-Control": "no-cache"}, timeout=timeout)
	req.raise_for_status()
	req.encoding = "utf-8"
	return parse_csv(req.text)

def fetch_sheet(sheet: SheetRef, timeout: float = config.API_TIMEOUT_SECONDS) -> list[SheetRow]:
	return fetch_rows(csv_url(sheet), timeout=timeout)

def read_rows(path: Path) -> list[SheetRow]:
	if not path.exists():
		raise FileNotFoundError(f"CSV file not found: {path}")
	with path.open("r", encoding="utf-8-sig", newline="") as fh:
		return parse_csv(fh.read())
