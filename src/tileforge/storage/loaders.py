"""Loaders for exported maps, quests, dialogues and the world layout.

All project data is JSON. Map and world-layout files use the editor's
camelCase export keys. Quest and dialogue files are hand-written, so
their keys are matched loosely: underscores are dropped and case is
ignored, which makes ``start_flag``, ``startFlag`` and ``StartFlag``
equivalent.

The ``*_from_json`` functions raise on malformed input. The file-level
helpers used during play degrade to empty results instead, so missing
content never stops a session.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel

from tileforge.core.exceptions import (
    DataLoadError,
    DialogueLoadError,
    MapLoadError,
    QuestLoadError,
)
from tileforge.core.logging import get_logger
from tileforge.models.dialogue import DialogueChoice, DialogueData, DialogueNode
from tileforge.models.map_data import LoadedMap
from tileforge.models.quest import QuestDefinition, QuestObjective, QuestRewards
from tileforge.models.world import WorldLayout


logger = get_logger(__name__)

MAP_SUFFIX = ".json"


# =============================================================================
# Key Normalization
# =============================================================================


def _normalize_key(key: str) -> str:
    return key.replace("_", "").casefold()


def _remap_keys(data: Any, model: type[BaseModel]) -> dict[str, Any]:
    """Rename loosely spelled keys to a model's field names, dropping unknown ones."""
    if not isinstance(data, dict):
        return {}
    lookup = {_normalize_key(name): name for name in model.model_fields}
    remapped: dict[str, Any] = {}
    for key, value in data.items():
        field_name = lookup.get(_normalize_key(str(key)))
        if field_name is not None:
            remapped[field_name] = value
    return remapped


def _objects(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _parse_json(text: str, error_cls: type[Exception], **context: Any) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise error_cls(f"Malformed JSON: {e.msg}", **context) from e


# =============================================================================
# Maps
# =============================================================================


def load_map_from_json(text: str, map_id: str | None = None) -> LoadedMap:
    """Parse an exported map.

    Args:
        text: Map export JSON.
        map_id: Identifier given to the map.

    Returns:
        The map, with null or missing group fields at their defaults.

    Raises:
        MapLoadError: If the JSON is malformed or does not describe a map.
    """
    data = _parse_json(text, MapLoadError, map_id=map_id)
    if not isinstance(data, dict):
        raise MapLoadError("Map JSON must be an object", map_id=map_id)

    try:
        return LoadedMap.model_validate({**data, "id": map_id})
    except pydantic.ValidationError as e:
        raise MapLoadError(
            "Invalid map data",
            map_id=map_id,
            details={"errors": e.error_count()},
        ) from e


def load_map(path: str | Path, map_id: str | None = None) -> LoadedMap:
    """Read and parse a map file.

    Raises:
        MapLoadError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MapLoadError("Cannot read map file", map_id=map_id, source=str(path)) from e
    return load_map_from_json(text, map_id)


def map_id_from_ref(map_ref: str) -> str:
    """Map id for a reference: the reference without a ``.json`` suffix."""
    return map_ref[: -len(MAP_SUFFIX)] if map_ref.endswith(MAP_SUFFIX) else map_ref


class MapRepository:
    """Finds and caches the maps of one project directory.

    A reference resolves to the first existing file of
    ``{base}/{ref}``, ``{base}/{ref}.json`` and ``{base}/maps/{ref}.json``.
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self._cache: dict[str, LoadedMap] = {}

    def resolve_path(self, map_ref: str) -> Path | None:
        """File a map reference points to, or None."""
        candidates = (
            self.base_path / map_ref,
            self.base_path / f"{map_ref}{MAP_SUFFIX}",
            self.base_path / "maps" / f"{map_ref}{MAP_SUFFIX}",
        )
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    def get(self, map_ref: str) -> LoadedMap | None:
        """Load a map by reference, or None if it is missing or invalid."""
        map_id = map_id_from_ref(map_ref)
        if map_id in self._cache:
            return self._cache[map_id]

        path = self.resolve_path(map_ref)
        if path is None:
            logger.debug("Map not found", map_ref=map_ref, base=str(self.base_path))
            return None

        try:
            loaded = load_map(path, map_id)
        except MapLoadError as e:
            logger.warning("Failed to load map", map_ref=map_ref, error=e.message)
            return None

        self._cache[map_id] = loaded
        return loaded

    def load_many(self, map_refs: Iterable[str]) -> dict[str, LoadedMap]:
        """Load several maps, keyed by id; unresolvable ones are left out."""
        maps: dict[str, LoadedMap] = {}
        for map_ref in map_refs:
            loaded = self.get(map_ref)
            if loaded is not None:
                maps[map_id_from_ref(map_ref)] = loaded
        return maps

    def clear_cache(self) -> None:
        self._cache.clear()


# =============================================================================
# Quests
# =============================================================================


def _build_quest(raw: dict[str, Any]) -> QuestDefinition:
    fields = _remap_keys(raw, QuestDefinition)
    fields["objectives"] = [
        QuestObjective.model_validate(_remap_keys(item, QuestObjective))
        for item in _objects(fields.get("objectives"))
    ]

    rewards = fields.get("rewards")
    if isinstance(rewards, dict):
        reward_fields = _remap_keys(rewards, QuestRewards)
        variables = reward_fields.get("set_variables")
        if isinstance(variables, dict):
            reward_fields["set_variables"] = {str(k): str(v) for k, v in variables.items()}
        fields["rewards"] = QuestRewards.model_validate(reward_fields)
    else:
        fields["rewards"] = None

    return QuestDefinition.model_validate(fields)


def load_quests_from_json(text: str) -> list[QuestDefinition]:
    """Parse a quest file of the form ``{"quests": [...]}``.

    Returns:
        The quests in file order; empty for empty input.

    Raises:
        QuestLoadError: If the JSON is malformed or a quest is invalid.
    """
    if not text or not text.strip():
        return []

    data = _parse_json(text, QuestLoadError)
    if not isinstance(data, dict):
        raise QuestLoadError("Quest file must be an object")

    raw_quests: Any = []
    for key, value in data.items():
        if _normalize_key(str(key)) == "quests":
            raw_quests = value

    try:
        return [_build_quest(raw) for raw in _objects(raw_quests)]
    except pydantic.ValidationError as e:
        raise QuestLoadError("Invalid quest data", details={"errors": e.error_count()}) from e


def load_quests(path: str | Path | None) -> list[QuestDefinition]:
    """Load quests from a file; empty when the file is missing or invalid."""
    if path is None:
        return []
    path = Path(path)
    if not path.is_file():
        return []

    try:
        quests = load_quests_from_json(path.read_text(encoding="utf-8"))
    except (OSError, QuestLoadError) as e:
        logger.warning("Failed to load quests", path=str(path), error=str(e))
        return []

    logger.info("Quests loaded", path=str(path), count=len(quests))
    return quests


# =============================================================================
# Dialogues
# =============================================================================


def _build_node(raw: dict[str, Any]) -> DialogueNode:
    fields = _remap_keys(raw, DialogueNode)
    if "choices" in fields and fields["choices"] is not None:
        fields["choices"] = [
            DialogueChoice.model_validate(_remap_keys(item, DialogueChoice))
            for item in _objects(fields["choices"])
        ]
    return DialogueNode.model_validate(fields)


def load_dialogue_from_json(text: str, dialogue_ref: str | None = None) -> DialogueData:
    """Parse a dialogue file.

    Raises:
        DialogueLoadError: If the JSON is malformed or the graph is invalid.
    """
    data = _parse_json(text, DialogueLoadError, dialogue_ref=dialogue_ref)
    if not isinstance(data, dict):
        raise DialogueLoadError("Dialogue JSON must be an object", dialogue_ref=dialogue_ref)

    fields = _remap_keys(data, DialogueData)
    try:
        fields["nodes"] = [_build_node(raw) for raw in _objects(fields.get("nodes"))]
        fields.setdefault("id", dialogue_ref or "")
        return DialogueData.model_validate(fields)
    except pydantic.ValidationError as e:
        raise DialogueLoadError(
            "Invalid dialogue data",
            dialogue_ref=dialogue_ref,
            details={"errors": e.error_count()},
        ) from e


class DialogueLoader:
    """Resolves dialogue references to files under a project directory.

    ``{base}/{ref}.json`` is tried first, then ``{base}/dialogues/{ref}.json``.
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)

    def resolve_path(self, dialogue_ref: str) -> Path | None:
        for candidate in (
            self.base_path / f"{dialogue_ref}.json",
            self.base_path / "dialogues" / f"{dialogue_ref}.json",
        ):
            if candidate.is_file():
                return candidate
        return None

    def load(self, dialogue_ref: str) -> DialogueData | None:
        """Load a dialogue, or None when it is missing or invalid."""
        if not dialogue_ref:
            return None
        try:
            path = self.resolve_path(dialogue_ref)
        except (OSError, ValueError):
            # Inline dialogue text is not always a valid path
            return None
        if path is None:
            return None

        try:
            return load_dialogue_from_json(path.read_text(encoding="utf-8"), dialogue_ref)
        except (OSError, DialogueLoadError) as e:
            logger.warning("Failed to load dialogue", dialogue_ref=dialogue_ref, error=str(e))
            return None


# =============================================================================
# World Layout
# =============================================================================


def load_world_layout_from_json(text: str) -> WorldLayout:
    """Parse a world layout ``{"maps": {name: placement}}``.

    Raises:
        DataLoadError: If the JSON is malformed or a placement is invalid.
    """
    data = _parse_json(text, DataLoadError)
    try:
        return WorldLayout.model_validate(data if data is not None else {})
    except pydantic.ValidationError as e:
        raise DataLoadError(
            "Invalid world layout",
            details={"errors": e.error_count()},
        ) from e


def load_world_layout(path: str | Path | None) -> WorldLayout:
    """Load the world layout; empty when the file is missing or invalid."""
    if path is None:
        return WorldLayout()
    path = Path(path)
    if not path.is_file():
        return WorldLayout()

    try:
        layout = load_world_layout_from_json(path.read_text(encoding="utf-8"))
    except (OSError, DataLoadError) as e:
        logger.warning("Failed to load world layout", path=str(path), error=str(e))
        return WorldLayout()

    logger.info("World layout loaded", path=str(path), maps=len(layout.maps))
    return layout


__all__ = [
    "DialogueLoader",
    "MapRepository",
    "load_dialogue_from_json",
    "load_map",
    "load_map_from_json",
    "load_quests",
    "load_quests_from_json",
    "load_world_layout",
    "load_world_layout_from_json",
    "map_id_from_ref",
]
