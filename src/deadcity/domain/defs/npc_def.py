"""NPC and dialogue definition structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(slots=True)
class DialogueOptionDef:
    text: str
    next: str | None = None
    requires: str | None = None


@dataclass(slots=True)
class DialogueNodeDef:
    id: str
    text: str = ""
    options: Tuple[DialogueOptionDef, ...] = ()
    sets_flag: str | None = None
    gives_item: str | None = None
    consumes_item: str | None = None
    recruits: bool = False


@dataclass(slots=True)
class GiftResponseDef:
    """How an NPC reacts when handed a specific item."""

    messages: Tuple[str, ...]
    sets_flag: str | None = None


@dataclass(slots=True)
class NpcDef:
    id: str
    name: str
    location: str
    greeting: str
    dialogue: Dict[str, DialogueNodeDef]
    description: str = ""
    presence_text: str | None = None
    appears_on_day: int | None = None
    night_only: bool = False
    accepts: Dict[str, GiftResponseDef] = field(default_factory=dict)
