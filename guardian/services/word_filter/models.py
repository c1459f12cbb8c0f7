"""
Word Filter Data Models
=======================

Per-guild NG-word ruleset.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Set


@dataclass
class NGWordRuleset:
    """
    Configurable NG-word rules for one guild.

    punishment_level: 0/1 delete only, 2-7 timeout (1 min -> 24 h),
    8 kick, 9 ban.
    """
    case_sensitive: bool = False
    check_edits: bool = True
    words: List[str] = field(default_factory=list)
    exception_roles: Set[int] = field(default_factory=set)
    dm_on_hit: bool = False
    punishment_level: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["exception_roles"] = sorted(self.exception_roles)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NGWordRuleset":
        level = int(data.get("punishment_level", 0))
        return cls(
            case_sensitive=bool(data.get("case_sensitive", False)),
            check_edits=bool(data.get("check_edits", True)),
            words=[str(w) for w in data.get("words", []) if str(w)],
            exception_roles={int(r) for r in data.get("exception_roles", [])},
            dm_on_hit=bool(data.get("dm_on_hit", False)),
            punishment_level=min(max(level, 0), 9),
        )
