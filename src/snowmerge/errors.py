class SaveMergerError(Exception):
    """Base error for snowmerge domain exceptions."""


class InvalidSave(SaveMergerError):
    """Raised when a save document failed to parse or is missing its profile."""


class InvalidSaveSlot(SaveMergerError):
    """Raised when a save slot number is outside the game's four slots (0-3)."""

    def __init__(self, slot: object) -> None:
        super().__init__(f"Invalid save slot: {slot!r} (expected 0-3)")
        self.slot = slot


class StructurallyInvalidArchive(SaveMergerError):
    """Raised when a save directory lacks its primary save file or map data."""


class SaveFormatError(SaveMergerError):
    """Raised when a profile field has a different shape than the save format declares."""
