"""Base repository implementation for JSON definition data."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, Iterable, List, TypeVar

from monrun.data.errors import DataValidationError
from monrun.data.json_loader import load_json
from monrun.data import paths

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

    def all(self) -> list[T]:
        """Return all definitions sorted deterministically by id."""
        self._ensure_loaded()
        assert self._definitions is not None
        return [self._definitions[key] for key in sorted(self._definitions.keys())]

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _assert_required(payload: dict[str, object], required: Iterable[str], context: str) -> None:
        missing = set(required) - payload.keys()
        if missing:
            raise DataValidationError(f"{context} missing fields: {sorted(missing)}")

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: object, context: str, *, minimum: int | None = None) -> int:
        # bool is an int subclass; reject it explicitly
        if not isinstance(value, int) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be an integer.")
        if minimum is not None and value < minimum:
            raise DataValidationError(f"{context} must be >= {minimum}.")
        return value

    @classmethod
    def _optional_int(cls, payload: dict[str, object], key: str, context: str) -> int | None:
        if payload.get(key) is None:
            return None
        return cls._require_int(payload[key], f"{context} {key}", minimum=0)

    @staticmethod
    def _optional_fraction(payload: dict[str, object], key: str, context: str) -> float | None:
        value = payload.get(key)
        if value is None:
            return None
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise DataValidationError(f"{context} {key} must be a number.")
        if not 0.0 <= float(value) <= 1.0:
            raise DataValidationError(f"{context} {key} must be between 0.0 and 1.0.")
        return float(value)

    @staticmethod
    def _optional_str(payload: dict[str, object], key: str, context: str) -> str | None:
        value = payload.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise DataValidationError(f"{context} {key} must be a string.")
        return value

    @staticmethod
    def _require_str_list(value: object, context: str) -> List[str]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        result: List[str] = []
        for entry in value:
            if not isinstance(entry, str):
                raise DataValidationError(f"{context} entries must be strings.")
            result.append(entry)
        return result

    @staticmethod
    def _require_literal(value: object, allowed: Iterable[str], context: str) -> str:
        allowed_values = set(allowed)
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        if value not in allowed_values:
            raise DataValidationError(f"{context} must be one of {sorted(allowed_values)}.")
        return value
