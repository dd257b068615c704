"""JSON artifact helpers with atomic replace-on-write semantics."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.errors import ArtifactParseError, ArtifactWriteError

ModelT = TypeVar("ModelT", bound=BaseModel)


def read_json(path: Path) -> Any:
    """Load a JSON document, raising ``ArtifactParseError`` when it is malformed.

    ``FileNotFoundError`` propagates unchanged so callers can treat a missing
    artifact as "not yet available" instead of a failure.
    """

    with path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise ArtifactParseError(f"Malformed JSON in {path}", path, detail=str(exc)) from exc


def read_model(path: Path, model: Type[ModelT]) -> ModelT:
    """Load ``path`` and validate it against ``model``."""

    payload = read_json(path)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ArtifactParseError(
            f"{path} does not match the {model.__name__} schema",
            path,
            detail=str(exc),
        ) from exc


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write ``payload`` to a temporary sibling and rename it over ``path``."""

    temp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        temp_path.replace(path)
    except (OSError, TypeError, ValueError) as exc:
        if temp_path.is_file():
            temp_path.unlink()
        raise ArtifactWriteError(f"Failed to write {path}", path, detail=str(exc)) from exc


def write_model_atomic(path: Path, model: BaseModel, *, exclude_unset: bool = False) -> None:
    """Serialise ``model`` with its camelCase aliases and write it atomically.

    ``exclude_unset`` keeps pass-through records (picks copied from upstream
    ledgers) free of keys their producer never wrote.
    """

    write_json_atomic(path, model.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset))


__all__ = ["read_json", "read_model", "write_json_atomic", "write_model_atomic"]
