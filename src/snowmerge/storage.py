from __future__ import annotations

import logging
from pathlib import Path
from typing import Collection, List, Optional, Set

from .errors import InvalidSave, StructurallyInvalidArchive
from .mapdata import MIN_MAP_DATA_FILES, MapDataFile, list_map_data, save_file_name, validate_save_contents
from .maps import discover_maps
from .save import decode_save
from .save.models import VISITED_LEVELS, SaveDocument, check_slot

logger = logging.getLogger(__name__)


class SaveDirectory:
    """An extracted save folder and the slot to read from it."""

    def __init__(self, path: Path, slot: int) -> None:
        self.path = Path(path)
        self.slot = check_slot(slot)

    def __repr__(self) -> str:
        return f"SaveDirectory({str(self.path)!r}, slot={self.slot})"

    @property
    def save_path(self) -> Path:
        return self.path / save_file_name(self.slot)

    def file_names(self) -> List[str]:
        if not self.path.is_dir():
            return []
        return sorted(p.name for p in self.path.iterdir() if p.is_file())

    def is_valid(self, min_map_files: int = MIN_MAP_DATA_FILES) -> bool:
        return validate_save_contents(self.file_names(), self.slot, min_map_files)

    def total_size(self) -> int:
        if not self.path.is_dir():
            return 0
        return sum(p.stat().st_size for p in self.path.iterdir() if p.is_file())

    def validate(self, min_map_files: int = MIN_MAP_DATA_FILES, max_size: Optional[int] = None) -> None:
        if not self.is_valid(min_map_files):
            raise StructurallyInvalidArchive(
                f"{self.path} is missing {save_file_name(self.slot)} or its map data files"
            )
        if max_size is not None and self.total_size() > max_size:
            raise StructurallyInvalidArchive(f"{self.path} is larger than {max_size} bytes")

    def read(self) -> Optional[SaveDocument]:
        """Parse the slot's save file; None if it is missing or unreadable."""
        if not self.save_path.exists():
            logger.warning("Save file not found: %s", self.save_path)
            return None
        raw = self.save_path.read_bytes()
        try:
            return decode_save(raw.decode("utf-8"), self.slot)
        except (UnicodeDecodeError, InvalidSave) as e:
            logger.warning("Could not parse %s: %s", self.save_path, e)
            return None

    def map_data(
        self,
        kinds: Optional[Collection[str]] = None,
        map_scope: Optional[Collection[str]] = None,
    ) -> List[MapDataFile]:
        return list_map_data(self.file_names(), self.slot, kinds, map_scope)

    def read_map_data(self, entry: MapDataFile) -> bytes:
        return (self.path / entry.name).read_bytes()

    def discovered_maps(self) -> Set[str]:
        """Map identifiers the save has visited, used to tag stored saves."""
        document = self.read()
        if document is None or document.profile is None:
            return set()
        return discover_maps(document.profile.id_set(VISITED_LEVELS))
