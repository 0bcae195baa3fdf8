from __future__ import annotations

import json
import logging
from typing import Any, Dict

from ..errors import InvalidSave
from .models import ProfileSnapshot, SaveDocument

logger = logging.getLogger(__name__)

SAVE_NAME = "CompleteSave"
KIND_KEY = "SslType"
PROFILE_KEY = "SslValue"


def save_key(slot: int) -> str:
    """Top-level key of a slot's save, e.g. ``CompleteSave`` or ``CompleteSave2``."""
    return f"{SAVE_NAME}{slot if slot > 0 else ''}"


def document_from_dict(data: Dict[str, Any], slot: int) -> SaveDocument:
    """Build a SaveDocument from a decoded save file.

    A missing or malformed envelope yields a document without a profile; the
    merge engine rejects those as invalid saves.
    """
    if not isinstance(data, dict):
        raise InvalidSave("Save data must be a JSON object")
    key = save_key(slot)
    extras = {k: v for k, v in data.items() if k != key}
    envelope = data.get(key)
    if not isinstance(envelope, dict):
        logger.warning("Save data has no %s entry", key)
        return SaveDocument(kind="", profile=None, slot=slot, extras=extras)

    kind = envelope.get(KIND_KEY) or ""
    raw_profile = envelope.get(PROFILE_KEY)
    profile = ProfileSnapshot.from_dict(raw_profile) if isinstance(raw_profile, dict) else None
    if profile is None:
        logger.warning("Save %s has no profile payload", key)
    return SaveDocument(kind=str(kind), profile=profile, slot=slot, extras=extras)


def decode_save(text: str, slot: int) -> SaveDocument:
    """Decode the text of a ``CompleteSave*.dat`` file."""
    # The game terminates the file with a NUL byte after the closing brace.
    text = text.rstrip("\x00 \t\r\n")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidSave(f"Invalid JSON: {e}") from e
    return document_from_dict(data, slot)


def document_to_dict(document: SaveDocument, slot: int) -> Dict[str, Any]:
    if document.profile is None:
        raise InvalidSave("Cannot encode a save without a profile")
    data: Dict[str, Any] = {
        save_key(slot): {
            KIND_KEY: document.kind,
            PROFILE_KEY: document.profile.to_dict(),
        }
    }
    for key, value in document.extras.items():
        data.setdefault(key, value)
    return data


def encode_save(document: SaveDocument, slot: int) -> str:
    """Encode a document as the save-file text for ``slot``.

    Array fields held as sets (visited levels, finished objectives and the
    like) are written sorted and without duplicates, whether or not a merge
    touched them. Every other value is written back as it was read.
    """
    return json.dumps(document_to_dict(document, slot), ensure_ascii=False, separators=(",", ":"))
