"""Base repository implementation for JSON definition data."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, List, Tuple, TypeVar

from deadcity.data import paths
from deadcity.data.errors import DataValidationError
from deadcity.data.json_loader import load_json

T = TypeVar("T")


class RepositoryBase(Generic[T]):
    """Common caching and loading behavior for repositories."""

    def __init__(self, filename: str, base_path: Path | str | None = None) -> None:
        self._filename = filename
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] | None = None

    def _get_file_path(self) -> Path:
        definitions_dir = paths.get_definitions_path(self._base_path)
        return definitions_dir / self._filename

    def _load_raw(self) -> dict[str, object]:
        file_path = self._get_file_path()
        raw = load_json(file_path)
        if not isinstance(raw, dict):
            raise DataValidationError(f"Expected top-level object in {file_path}")
        return raw

    def _build(self, raw: dict[str, object]) -> Dict[str, T]:
        """Convert a raw dict into typed definitions."""
        raise NotImplementedError

    def _ensure_loaded(self) -> None:
        if self._definitions is None:
            raw = self._load_raw()
            self._definitions = self._build(raw)

    def get(self, def_id: str) -> T:
        """Return a definition by id."""
        self._ensure_loaded()
        assert self._definitions is not None
        try:
            return self._definitions[def_id]
        except KeyError as exc:
            raise KeyError(def_id) from exc

    def find(self, def_id: str) -> T | None:
        """Return a definition by id, or None when it is not defined."""
        self._ensure_loaded()
        assert self._definitions is not None
        return self._definitions.get(def_id)

    def has(self, def_id: str) -> bool:
        return self.find(def_id) is not None

    def all(self) -> list[T]:
        """Return all definitions sorted deterministically by id."""
        self._ensure_loaded()
        assert self._definitions is not None
        return [self._definitions[key] for key in sorted(self._definitions.keys())]

    def ordered(self) -> list[T]:
        """Return all definitions in file order."""
        self._ensure_loaded()
        assert self._definitions is not None
        return list(self._definitions.values())

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_type(value: object, expected_type: type, context: str) -> object:
        if not isinstance(value, expected_type):
            raise DataValidationError(f"{context} must be of type {expected_type.__name__}.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @classmethod
    def _optional_str(cls, value: object, context: str) -> str | None:
        if value is None:
            return None
        return cls._require_str(value, context)

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    @classmethod
    def _optional_int(cls, value: object, context: str) -> int | None:
        if value is None:
            return None
        return cls._require_int(value, context)

    @staticmethod
    def _require_number(value: object, context: str) -> float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be a number.")
        return float(value)

    @staticmethod
    def _require_bool(value: object, context: str) -> bool:
        if not isinstance(value, bool):
            raise DataValidationError(f"{context} must be a boolean.")
        return value

    @staticmethod
    def _require_str_list(value: object, context: str) -> List[str]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        result: List[str] = []
        for item in value:
            if not isinstance(item, str):
                raise DataValidationError(f"{context} entries must be strings.")
            result.append(item)
        return result

    @classmethod
    def _require_range(cls, value: object, context: str) -> Tuple[int, int]:
        if not isinstance(value, list) or len(value) != 2:
            raise DataValidationError(f"{context} must be a [min, max] pair.")
        low = cls._require_int(value[0], f"{context}[0]")
        high = cls._require_int(value[1], f"{context}[1]")
        if low > high:
            raise DataValidationError(f"{context} min must not exceed max.")
        return low, high

    @staticmethod
    def _assert_required(payload: dict[str, object], required: set[str], context: str) -> None:
        missing = required - payload.keys()
        if missing:
            raise DataValidationError(f"{context} missing fields: {sorted(missing)}")

    @staticmethod
    def _assert_known_fields(payload: dict[str, object], allowed: set[str], context: str) -> None:
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise DataValidationError(f"{context} has unknown fields: {sorted(unknown)}")
