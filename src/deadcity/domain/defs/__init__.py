"""Domain definition exports."""

from .enemy_def import EnemyDef
from .escape_route_def import (
    ConditionDef,
    EscapeRouteDef,
    MissingPieceDef,
    RouteClimaxDef,
    RouteHintDef,
    RouteStepDef,
)
from .event_def import EventConditionsDef, EventEffectDef, RandomEventDef, ScriptedEventDef
from .item_def import ItemDef
from .npc_def import DialogueNodeDef, DialogueOptionDef, GiftResponseDef, NpcDef
from .room_def import EncounterDef, ExitDef, RoomDef, RoomDescriptionDef

__all__ = [
    "ConditionDef",
    "DialogueNodeDef",
    "DialogueOptionDef",
    "EncounterDef",
    "EnemyDef",
    "EscapeRouteDef",
    "EventConditionsDef",
    "EventEffectDef",
    "ExitDef",
    "GiftResponseDef",
    "ItemDef",
    "MissingPieceDef",
    "NpcDef",
    "RandomEventDef",
    "RoomDef",
    "RoomDescriptionDef",
    "RouteClimaxDef",
    "RouteHintDef",
    "RouteStepDef",
    "ScriptedEventDef",
]
