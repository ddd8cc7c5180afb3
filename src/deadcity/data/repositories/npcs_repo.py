"""NPCs repository."""
from __future__ import annotations

from typing import Dict

from deadcity.data.errors import DataValidationError
from deadcity.data.repositories.base import RepositoryBase
from deadcity.domain.defs import DialogueNodeDef, DialogueOptionDef, GiftResponseDef, NpcDef


class NpcsRepository(RepositoryBase[NpcDef]):
    """Loads NPC definitions together with their dialogue trees."""

    def __init__(self, base_path=None) -> None:
        super().__init__("npcs.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, NpcDef]:
        npcs: Dict[str, NpcDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("NPC IDs must be strings.")
            context = f"npc '{raw_id}'"
            npc_data = self._require_mapping(payload, context)
            self._assert_required(npc_data, {"name", "location", "greeting", "dialogue"}, context)

            dialogue = self._parse_dialogue(npc_data["dialogue"], context)
            if "root" not in dialogue:
                raise DataValidationError(f"{context} dialogue must define a 'root' node.")

            npcs[raw_id] = NpcDef(
                id=raw_id,
                name=self._require_str(npc_data["name"], f"{context} name"),
                location=self._require_str(npc_data["location"], f"{context} location"),
                greeting=self._require_str(npc_data["greeting"], f"{context} greeting"),
                dialogue=dialogue,
                description=self._require_str(npc_data.get("description", ""), f"{context} description"),
                presence_text=self._optional_str(npc_data.get("presence_text"), f"{context} presence_text"),
                appears_on_day=self._optional_int(npc_data.get("appears_on_day"), f"{context} appears_on_day"),
                night_only=self._require_bool(npc_data.get("night_only", False), f"{context} night_only"),
                accepts=self._parse_accepts(npc_data.get("accepts", {}), context),
            )
        return npcs

    def _parse_dialogue(self, value: object, context: str) -> Dict[str, DialogueNodeDef]:
        nodes_data = self._require_mapping(value, f"{context} dialogue")
        nodes: Dict[str, DialogueNodeDef] = {}
        for node_id, raw_node in nodes_data.items():
            node_context = f"{context} node '{node_id}'"
            node_data = self._require_mapping(raw_node, node_context)
            options = []
            raw_options = node_data.get("options", [])
            if not isinstance(raw_options, list):
                raise DataValidationError(f"{node_context} options must be a list.")
            for index, raw_option in enumerate(raw_options):
                option_context = f"{node_context} options[{index}]"
                option_data = self._require_mapping(raw_option, option_context)
                options.append(
                    DialogueOptionDef(
                        text=self._require_str(option_data.get("text"), f"{option_context} text"),
                        next=self._optional_str(option_data.get("next"), f"{option_context} next"),
                        requires=self._optional_str(option_data.get("requires"), f"{option_context} requires"),
                    )
                )
            nodes[node_id] = DialogueNodeDef(
                id=node_id,
                text=self._require_str(node_data.get("text", ""), f"{node_context} text"),
                options=tuple(options),
                sets_flag=self._optional_str(node_data.get("sets_flag"), f"{node_context} sets_flag"),
                gives_item=self._optional_str(node_data.get("gives_item"), f"{node_context} gives_item"),
                consumes_item=self._optional_str(node_data.get("consumes_item"), f"{node_context} consumes_item"),
                recruits=self._require_bool(node_data.get("recruits", False), f"{node_context} recruits"),
            )
        for node in nodes.values():
            for option in node.options:
                if option.next is not None and option.next not in nodes:
                    raise DataValidationError(
                        f"{context} node '{node.id}' links to unknown node '{option.next}'."
                    )
        return nodes

    def _parse_accepts(self, value: object, context: str) -> Dict[str, GiftResponseDef]:
        accepts_data = self._require_mapping(value, f"{context} accepts")
        accepts: Dict[str, GiftResponseDef] = {}
        for item_id, raw_response in accepts_data.items():
            response_context = f"{context} accepts '{item_id}'"
            response = self._require_mapping(raw_response, response_context)
            accepts[item_id] = GiftResponseDef(
                messages=tuple(self._require_str_list(response.get("messages", []), f"{response_context} messages")),
                sets_flag=self._optional_str(response.get("sets_flag"), f"{response_context} sets_flag"),
            )
        return accepts
