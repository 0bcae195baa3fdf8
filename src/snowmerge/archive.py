from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Collection, Dict, Iterable, List, Optional

from .fs import atomic_output
from .mapdata import FOG, MAP_DATA_KINDS, STS, save_file_name
from .options import MergeOption
from .save import encode_save
from .save.models import SaveDocument
from .storage import SaveDirectory

logger = logging.getLogger(__name__)


@dataclass
class OutputBundle:
    """Files of the merged save, keyed by their name inside the archive."""

    files: Dict[str, bytes] = field(default_factory=dict)

    def add(self, name: str, data: bytes) -> None:
        if name in self.files:
            logger.debug("Replacing %s in output bundle", name)
        self.files[name] = data

    def names(self) -> List[str]:
        return sorted(self.files)

    def write_to(self, fileobj: BinaryIO) -> None:
        """Write the bundle as a zip archive, members in name order."""
        with zipfile.ZipFile(fileobj, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name in self.names():
                archive.writestr(name, self.files[name])

    def to_zip_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write_to(buffer)
        return buffer.getvalue()

    def write_zip(self, path: Path) -> Path:
        with atomic_output(path) as f:
            self.write_to(f)
        logger.info("Wrote merged save archive %s (%d files)", path, len(self.files))
        return path


def copy_map_data(
    bundle: OutputBundle,
    source: SaveDirectory,
    output_slot: int,
    kinds: Collection[str] = MAP_DATA_KINDS,
    map_scope: Optional[Collection[str]] = None,
) -> List[str]:
    """Copy ``source``'s map data files into ``bundle`` under ``output_slot`` names."""
    copied = []
    for entry in source.map_data(kinds, map_scope):
        name = entry.renamed(output_slot)
        bundle.add(name, source.read_map_data(entry))
        copied.append(name)
    logger.debug("Copied %d %s files from %s", len(copied), "/".join(kinds), source)
    return copied


def assemble_output(
    merged: SaveDocument,
    output_slot: int,
    options: Iterable[MergeOption],
    base: SaveDirectory,
    incoming: Optional[SaveDirectory] = None,
    map_scope: Optional[Collection[str]] = None,
) -> OutputBundle:
    """Bundle a merged save with the map data files that belong to it.

    The incoming save's own map data comes first; the base save's fog files
    (map progress) and sts files (vehicles in the world) then replace them
    for the maps in scope.
    """
    options = frozenset(options)
    bundle = OutputBundle()
    if incoming is not None:
        copy_map_data(bundle, incoming, output_slot)

    bundle.add(save_file_name(output_slot), encode_save(merged, output_slot).encode("utf-8"))

    if MergeOption.MAP_PROGRESS in options:
        copy_map_data(bundle, base, output_slot, (FOG,), map_scope)
    if MergeOption.VEHICLES_IN_WORLD in options:
        copy_map_data(bundle, base, output_slot, (STS,), map_scope)
    return bundle
