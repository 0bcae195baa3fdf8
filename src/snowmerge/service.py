from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Set

from .archive import OutputBundle, assemble_output
from .config import MergerSettings
from .errors import InvalidSave
from .maps import discover_maps
from .merge import merge_saves
from .request import MergeRequest
from .save.models import VISITED_LEVELS, SaveDocument
from .storage import SaveDirectory

logger = logging.getLogger(__name__)


@dataclass
class MergeOutcome:
    document: SaveDocument
    bundle: OutputBundle
    discovered_maps: Set[str] = field(default_factory=set)
    changes: Dict[str, int] = field(default_factory=dict)


class MergeService:
    """Merges an uploaded save with a stored group save on disk.

    Both saves are expected as extracted folders. The service validates them,
    runs the merge engine and bundles the result with its map data files.
    """

    def __init__(self, settings: Optional[MergerSettings] = None) -> None:
        self.settings = settings or MergerSettings()

    def open(self, path: Path, slot: int) -> SaveDirectory:
        directory = SaveDirectory(path, slot)
        directory.validate(
            min_map_files=self.settings.archive.min_map_files,
            max_size=self.settings.archive.max_archive_size,
        )
        return directory

    def merge(self, request: MergeRequest, incoming_dir: Path, base_dir: Path) -> MergeOutcome:
        incoming = self.open(incoming_dir, request.incoming_slot)
        base = self.open(base_dir, request.base_slot)

        result = merge_saves(
            incoming.read(),
            base.read(),
            request.output_slot,
            request.options,
            request.map_scope,
        )
        if not result.success or result.document is None:
            raise InvalidSave(result.message or "Save is invalid")

        bundle = assemble_output(
            result.document,
            request.output_slot,
            request.options,
            base,
            incoming=incoming,
            map_scope=request.map_scope,
        )
        discovered = discover_maps(result.document.profile.id_set(VISITED_LEVELS))
        logger.info(
            "Merged %s into %s: %d files, maps %s",
            base,
            incoming,
            len(bundle.files),
            sorted(discovered),
        )
        return MergeOutcome(
            document=result.document,
            bundle=bundle,
            discovered_maps=discovered,
            changes=result.changes,
        )

    def describe(self, path: Path, slot: int) -> Set[str]:
        """Map identifiers a stored save has discovered."""
        return self.open(path, slot).discovered_maps()
