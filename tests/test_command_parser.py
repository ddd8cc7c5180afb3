from __future__ import annotations

import pytest

from deadcity.services.command_parser import CommandParser, ExitRef, NamedRef, ParserContext


def _make_context() -> ParserContext:
    return ParserContext(
        items=[
            NamedRef(id="bottled_water", name="Bottled Water"),
            NamedRef(id="kitchen_knife", name="Kitchen Knife"),
            NamedRef(id="canned_food", name="Canned Cassoulet"),
        ],
        exits={
            "north": ExitRef(room_id="rue_de_rivoli", description="Rue de Rivoli"),
            "tunnel": ExitRef(room_id="metro_tunnel", description="The maintenance door to the tunnel"),
        },
        npcs=[NamedRef(id="old_jean", name="Old Jean")],
    )


@pytest.mark.parametrize(
    ("text", "verb", "noun"),
    [
        ("n", "go", "north"),
        ("i", "inventory", None),
        ("l", "look", None),
        ("?", "help", None),
        ("north", "go", "north"),
        ("upstairs", "go", "up"),
        ("go west", "go", "west"),
        ("walk n", "go", "north"),
    ],
)
def test_shortcuts_and_directions(text: str, verb: str, noun: str | None) -> None:
    cmd = CommandParser().parse(text)
    assert cmd.verb == verb
    assert cmd.noun == noun


def test_empty_input_is_unrecognized() -> None:
    cmd = CommandParser().parse("   ")
    assert cmd.verb is None
    assert not cmd.recognized


def test_unknown_verb_is_unrecognized() -> None:
    cmd = CommandParser().parse("dance wildly", _make_context())
    assert cmd.verb is None
    assert cmd.noun == "dance wildly"


def test_synonyms_map_to_canonical_verb() -> None:
    parser = CommandParser()
    assert parser.parse("grab knife", _make_context()).verb == "take"
    assert parser.parse("drink water", _make_context()).verb == "use"
    assert parser.parse("rummage").verb == "search"
    assert parser.parse("sleep").verb == "wait"


def test_articles_are_stripped_and_item_resolved_by_name() -> None:
    cmd = CommandParser().parse("take the bottled water", _make_context())
    assert cmd.verb == "take"
    assert cmd.noun == "bottled_water"


def test_pick_up_is_take() -> None:
    cmd = CommandParser().parse("pick up knife", _make_context())
    assert cmd.verb == "take"
    assert cmd.noun == "kitchen_knife"


def test_item_resolution_priority_exact_id_first() -> None:
    cmd = CommandParser().parse("use canned_food", _make_context())
    assert cmd.noun == "canned_food"


def test_item_resolution_by_word_overlap() -> None:
    cmd = CommandParser().parse("eat cassoulets", _make_context())
    assert cmd.noun == "canned_food"


def test_unresolved_item_keeps_raw_token() -> None:
    cmd = CommandParser().parse("take spaceship", _make_context())
    assert cmd.verb == "take"
    assert cmd.noun == "spaceship"


def test_preposition_splits_noun_and_modifier() -> None:
    cmd = CommandParser().parse("give canned food to jean", _make_context())
    assert cmd.verb == "give"
    assert cmd.noun == "canned_food"
    assert cmd.modifier == "old_jean"


def test_talk_resolves_npc() -> None:
    cmd = CommandParser().parse("talk to old jean", _make_context())
    assert cmd.verb == "talk"
    assert cmd.noun == "old_jean"


def test_go_resolves_named_exit() -> None:
    parser = CommandParser()
    assert parser.parse("go tunnel", _make_context()).noun == "tunnel"
    assert parser.parse("go maintenance door", _make_context()).noun == "tunnel"


def test_bare_exit_name_implies_go() -> None:
    cmd = CommandParser().parse("tunnel", _make_context())
    assert cmd.verb == "go"
    assert cmd.noun == "tunnel"


def test_parse_is_deterministic_and_pure() -> None:
    parser = CommandParser()
    context = _make_context()
    first = parser.parse("Take the Kitchen Knife", context)
    second = parser.parse("Take the Kitchen Knife", context)
    assert first == second
    assert first.raw == "take the kitchen knife"
    assert [item.id for item in context.items] == ["bottled_water", "kitchen_knife", "canned_food"]
