"""JSON encoding of the note collection blob."""

from __future__ import annotations
from typing import Sequence

from pydantic import TypeAdapter, ValidationError

from .errors import CorruptStateError
from .models import Note

_NOTES = TypeAdapter(list[Note])


def encode_notes(notes: Sequence[Note]) -> str:
    return _NOTES.dump_json(list(notes), by_alias=True).decode("utf-8")


def decode_notes(blob: str | bytes) -> list[Note]:
    """Decode a stored blob, raising CorruptStateError on bad JSON or bad shape."""
    try:
        notes = _NOTES.validate_json(blob)
    except ValidationError as e:
        raise CorruptStateError(
            f"stored notes are malformed ({e.error_count()} problem(s)): "
            f"{e.errors()[0]['msg']}"
        ) from e
    ids = [n.id for n in notes]
    if len(set(ids)) != len(ids):
        raise CorruptStateError("stored notes contain duplicate ids")
    return notes
