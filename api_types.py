#define sheet row and ladder payload types
from typing import Dict, List, Optional, TypedDict

# One CSV row as exported by the sheet, keyed by its header text.
SheetRow = Dict[str, str]

class SheetRef(TypedDict):
	id: str
	gid: str

class BadgePayload(TypedDict):
	kind: str
	up: Optional[int]

class LadderRowPayload(TypedDict):
	id: str
	name: str
	baseClass: str
	rank: int
	wasRank: Optional[int]
	delta: Optional[int]
	badge: Optional[BadgePayload]

class EventPayload(TypedDict):
	type: str
	when: str
	jump: int

class LadderPayload(TypedDict):
	generatedAt: str
	cutoff: Optional[str]
	windowDays: int
	showBadges: bool
	ladders: Dict[str, List[LadderRowPayload]]
	lastEventMap: Dict[str, EventPayload]
	lastJumpMap: Dict[str, int]
