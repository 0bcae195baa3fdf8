"""Save document model and the save-file codec.

A save file holds one top-level entry per slot (``CompleteSave<n>``) wrapping
the ``SslType`` discriminator and the ``SslValue`` profile, next to sibling
entries such as ``cfg_version`` that are carried through untouched.
"""

from .codec import (
    SAVE_NAME,
    decode_save,
    document_from_dict,
    document_to_dict,
    encode_save,
    save_key,
)
from .models import (
    PROFILE_FIELDS,
    SAVE_SLOTS,
    VERSION_KEY,
    check_slot,
    FieldKind,
    ProfileField,
    ProfileSnapshot,
    SaveDocument,
)

__all__ = [
    "SAVE_NAME",
    "VERSION_KEY",
    "PROFILE_FIELDS",
    "SAVE_SLOTS",
    "check_slot",
    "FieldKind",
    "ProfileField",
    "ProfileSnapshot",
    "SaveDocument",
    "decode_save",
    "document_from_dict",
    "document_to_dict",
    "encode_save",
    "save_key",
]
