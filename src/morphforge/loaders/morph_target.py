"""Morph target export: one morph payload per level of detail."""

import logging
from pathlib import Path
from typing import Any, Optional

from morphforge.constants import MORPH_TARGET_OPTION
from morphforge.core.archive import ArchiveError, BinaryArchive
from morphforge.core.strip_flags import StripDataFlags
from morphforge.core.uobject import UObject
from morphforge.core.versions import UnresolvedVersionError, VersionContext
from morphforge.loaders.morph_lod import (
    LayoutSelectionError, LodMorphDecoder, LodMorphPayload,
)

logger = logging.getLogger(__name__)


class AssetDecodeError(RuntimeError):
    """The asset could not be decoded; the cause is chained."""


class MorphTarget(UObject):
    """Decoded morph target asset.

    lod_models defaults to a single empty payload and keeps that value when
    the stream has no morph data (feature absent or stripped for server).
    """

    def __init__(self, name: str = ""):
        super().__init__(name)
        self.lod_models: tuple[LodMorphPayload, ...] = (LodMorphPayload.empty(),)

    def deserialize(self, ar: BinaryArchive, valid_pos: int) -> None:
        super().deserialize(ar, valid_pos)

        if not ar.versions.option(MORPH_TARGET_OPTION):
            logger.info("Morph targets absent from stream, skipping %r to %d",
                        self.name, valid_pos)
            ar.seek(valid_pos)
            return

        strip = StripDataFlags.read(ar)
        if strip.is_data_stripped_for_server():
            logger.info("Morph target %r is stripped for server", self.name)
            return

        decoder = None

        def read_lod() -> LodMorphPayload:
            # Built on the first LOD so an empty array never resolves a layout
            nonlocal decoder
            if decoder is None:
                decoder = LodMorphDecoder(ar.versions)
            return decoder.decode(ar)

        self.lod_models = tuple(ar.read_array(read_lod))
        logger.debug("Morph target %r: %d LODs", self.name, len(self.lod_models))

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["MorphLODModels"] = [lod.to_dict() for lod in self.lod_models]
        return out


def decode_morph_target(ar: BinaryArchive, valid_pos: int, name: str = "") -> MorphTarget:
    """Decode a morph target export starting at the archive's cursor."""
    asset = MorphTarget(name)
    asset.deserialize(ar, valid_pos)
    return asset


def load_morph_target(
    data: bytes,
    versions: VersionContext,
    name: str = "",
    valid_pos: Optional[int] = None,
) -> MorphTarget:
    """Decode a morph target export body held in ``data``.

    Raises
    ------
    AssetDecodeError
        If the stream is truncated or malformed, or the version context
        cannot resolve the layout.
    """
    ar = BinaryArchive(data, versions, name=name)
    if valid_pos is None:
        valid_pos = ar.size
    try:
        return decode_morph_target(ar, valid_pos, name=name)
    except (ArchiveError, UnresolvedVersionError, LayoutSelectionError) as exc:
        raise AssetDecodeError(f"Morph target {name!r} could not be decoded: {exc}") from exc


def load_morph_target_file(path, versions: VersionContext, offset: int = 0,
                           end: Optional[int] = None) -> MorphTarget:
    """Load a morph target export body from disk.

    Parameters
    ----------
    path : str or Path
        File holding the serialized export.
    versions : VersionContext
        Version context of the package the export came from.
    offset, end : int
        Byte range of the export inside the file; ``end`` defaults to the
        end of the file.
    """
    path = Path(path)
    with open(path, "rb") as f:
        data = f.read()
    if end is None:
        end = len(data)
    return load_morph_target(data[offset:end], versions, name=path.stem)
