"""Turns raw player input into a structured command."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

VERB_SYNONYMS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("go", ("go", "walk", "run", "move", "head", "travel", "enter")),
    ("look", ("look", "examine", "inspect", "check", "read", "view")),
    ("search", ("search", "rummage", "scavenge", "loot", "ransack")),
    ("take", ("take", "pick", "grab", "get", "collect")),
    ("drop", ("drop", "discard", "leave", "put", "dump")),
    ("use", ("use", "apply", "consume", "eat", "drink", "activate")),
    ("equip", ("equip", "wield", "wear", "hold")),
    ("unequip", ("unequip", "remove", "unwield", "stow")),
    ("open", ("open",)),
    ("close", ("close", "shut")),
    ("unlock", ("unlock",)),
    ("lock", ("lock",)),
    ("attack", ("attack", "fight", "hit", "strike", "kill", "shoot", "stab", "slash", "swing")),
    ("defend", ("defend", "block", "guard", "brace")),
    ("flee", ("flee", "escape", "retreat", "run")),
    ("talk", ("talk", "speak", "ask", "chat", "greet", "hail")),
    ("trade", ("trade", "barter", "buy", "sell", "swap")),
    ("give", ("give", "offer", "hand")),
    ("inventory", ("inventory", "inv", "items", "bag")),
    ("help", ("help", "commands")),
    ("wait", ("wait", "rest", "sleep", "hide", "camp")),
    ("barricade", ("barricade", "fortify", "block", "board")),
    ("save", ("save",)),
    ("load", ("load", "restore")),
    ("status", ("status", "stats", "health", "hp", "me")),
    ("map", ("map",)),
    ("quit", ("quit", "exit")),
)

DIRECTION_MAP: Dict[str, str] = {
    "north": "north", "n": "north",
    "south": "south", "s": "south",
    "east": "east", "e": "east", "right": "east",
    "west": "west", "w": "west", "left": "west",
    "up": "up", "upstairs": "up", "ascend": "up", "climb": "up",
    "down": "down", "downstairs": "down", "descend": "down",
    "inside": "inside", "in": "inside",
    "outside": "outside", "out": "outside",
    "northeast": "northeast", "ne": "northeast",
    "northwest": "northwest", "nw": "northwest",
    "southeast": "southeast", "se": "southeast",
    "southwest": "southwest", "sw": "southwest",
}

SHORTCUTS: Dict[str, Tuple[str, str | None]] = {
    "n": ("go", "north"),
    "s": ("go", "south"),
    "e": ("go", "east"),
    "w": ("go", "west"),
    "u": ("go", "up"),
    "d": ("go", "down"),
    "i": ("inventory", None),
    "l": ("look", None),
    "x": ("look", None),
    "h": ("help", None),
    "?": ("help", None),
}

ARTICLES = frozenset({"the", "a", "an", "some", "this", "that", "my"})
PREPOSITIONS = frozenset({"to", "at", "on", "in", "with", "from", "into", "onto", "under", "behind", "through"})

ITEM_VERBS = frozenset({"take", "drop", "use", "equip", "unequip", "give", "look"})
NPC_VERBS = frozenset({"talk", "trade", "give"})
_ALL_KEYWORDS = frozenset({"all", "everything"})


@dataclass(slots=True)
class NamedRef:
    """Something the player can refer to by id or display name."""

    id: str
    name: str


@dataclass(slots=True)
class ExitRef:
    room_id: str
    description: str = ""


@dataclass(slots=True)
class ParserContext:
    """Vocabulary visible from the player's current position."""

    items: List[NamedRef] = field(default_factory=list)
    exits: Dict[str, ExitRef] = field(default_factory=dict)
    npcs: List[NamedRef] = field(default_factory=list)


@dataclass(slots=True)
class ParsedCommand:
    verb: str | None
    noun: str | None = None
    modifier: str | None = None
    raw: str = ""

    @property
    def recognized(self) -> bool:
        return self.verb is not None


def resolve_verb(word: str) -> str | None:
    """Return the first canonical verb listing ``word`` as a synonym."""
    for canonical, synonyms in VERB_SYNONYMS:
        if word in synonyms:
            return canonical
    return None


def is_direction(word: str) -> bool:
    return word in DIRECTION_MAP


class CommandParser:
    """Stateless interpreter; identical input and context give identical output."""

    def parse(self, text: str, context: ParserContext | None = None) -> ParsedCommand:
        context = context or ParserContext()
        raw = text.strip().lower()
        if not raw:
            return ParsedCommand(verb=None, raw=raw)

        shortcut = SHORTCUTS.get(raw)
        if shortcut is not None:
            return ParsedCommand(verb=shortcut[0], noun=shortcut[1], raw=raw)

        tokens = [token for token in raw.split() if token not in ARTICLES]
        if not tokens:
            return ParsedCommand(verb=None, raw=raw)

        if len(tokens) == 1 and is_direction(tokens[0]):
            return ParsedCommand(verb="go", noun=DIRECTION_MAP[tokens[0]], raw=raw)

        verb_word = tokens[0]
        verb = resolve_verb(verb_word)
        if verb_word == "pick" and len(tokens) > 1 and tokens[1] == "up":
            verb = "take"
            del tokens[1]
        if verb == "look" and len(tokens) > 1 and tokens[1] == "at":
            del tokens[1]

        if verb is None:
            exit_key = self.resolve_exit(raw, context)
            if exit_key is not None:
                return ParsedCommand(verb="go", noun=exit_key, raw=raw)
            return ParsedCommand(verb=None, noun=raw, raw=raw)

        noun, modifier = self._split_rest(verb, tokens[1:])

        if verb == "go" and noun and not is_direction(noun):
            exit_key = self.resolve_exit(noun, context)
            if exit_key is not None:
                noun = exit_key

        if verb in ITEM_VERBS and noun and noun not in _ALL_KEYWORDS:
            noun = self.resolve_item(noun, context.items)
        if modifier:
            if verb == "give":
                modifier = self.resolve_npc(modifier, context.npcs)
            else:
                modifier = self.resolve_item(modifier, context.items)

        if verb in NPC_VERBS and noun:
            noun = self.resolve_npc(noun, context.npcs)

        return ParsedCommand(verb=verb, noun=noun, modifier=modifier, raw=raw)

    @staticmethod
    def _split_rest(verb: str, rest: Sequence[str]) -> Tuple[str | None, str | None]:
        for index, token in enumerate(rest):
            if index > 0 and token in PREPOSITIONS:
                return " ".join(rest[:index]), " ".join(rest[index + 1:]) or None
        if not rest:
            return None, None
        if verb == "go" and is_direction(rest[0]):
            return DIRECTION_MAP[rest[0]], None
        return " ".join(rest), None

    @staticmethod
    def resolve_exit(name: str, context: ParserContext) -> str | None:
        """Match free text against exit keys, target rooms, then descriptions."""
        lowered = name.lower()
        collapsed = "".join(lowered.split())
        for direction, exit_ref in context.exits.items():
            if direction.lower() == collapsed:
                return direction
            if exit_ref.room_id and "".join(exit_ref.room_id.lower().split()) == collapsed:
                return direction
            description = exit_ref.description.lower()
            if description and (lowered in description or description in lowered):
                return direction
        return None

    @staticmethod
    def resolve_item(name: str, items: Sequence[NamedRef]) -> str:
        """Return the matching item id, or ``name`` unchanged when nothing matches."""
        lowered = name.lower()
        for item in items:
            if item.id == lowered:
                return item.id
        for item in items:
            if item.name.lower() == lowered:
                return item.id
        for item in items:
            item_name = item.name.lower()
            if lowered in item_name or item_name in lowered:
                return item.id
        keywords = lowered.split()
        for item in items:
            item_words = item.name.lower().split()
            if any(kw in word or word in kw for kw in keywords for word in item_words):
                return item.id
        return name

    @staticmethod
    def resolve_npc(name: str, npcs: Sequence[NamedRef]) -> str:
        lowered = name.lower()
        for npc in npcs:
            if npc.id == lowered or npc.name.lower() == lowered:
                return npc.id
        for npc in npcs:
            npc_name = npc.name.lower()
            if lowered in npc_name or npc_name in lowered:
                return npc.id
        return name
