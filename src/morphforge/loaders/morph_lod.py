"""Per-LOD morph payload and its versioned binary layouts.

Four historical layouts exist.  Which one applies is decided once per
version context by walking an ordered table of ``(predicate, layout)``
pairs; the predicates are written so that exactly one matches for any
resolved context, and the table order is the precedence order.

    LEGACY          deltas, base vertex count
    SECTION_INDICES deltas, base vertex count, section indices
    GAME_VARIANT    (skip 4) section indices, generated flag
    MAINLINE        [stripped flag] deltas or (skip 4), base vertex count,
                    section indices, generated flag

Every layout except GAME_VARIANT may be followed by the source filename
string once custom import tracking is present in the stream.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from morphforge.constants import (
    EDITOR_ADDED_MORPH_TARGET_SECTION_INDICES,
    FORTNITE_MORPH_TARGET_CUSTOM_IMPORT,
    FORTNITE_SAVE_GENERATED_MORPH_TARGET_BY_ENGINE,
    FROSTY_STRIP_MORPH_TARGET_SOURCE_DATA_FOR_COOKED_BUILDS,
    VER_UE4_MORPHTARGET_CPU_TANGENTZDELTA_FORMATCHANGE,
)
from morphforge.core.archive import BinaryArchive
from morphforge.core.versions import FeatureStream, Game, VersionContext
from morphforge.loaders.morph_delta import DeltaRecord, decode_delta

logger = logging.getLogger(__name__)

# Game whose LOD layout carries only section indices and the generated flag
SECTIONS_ONLY_GAME = Game.THE_CASTING_OF_FRANK_STONE

# Encoder-written vertex count that the decoder does not use
_SKIPPED_COUNT_SIZE = 4


@dataclass(frozen=True)
class LodMorphPayload:
    """Morph deltas for one level of detail.

    vertices may be empty while num_base_mesh_verts > 0 (cooked builds).
    source_filename is None when the stream predates custom import
    tracking; an empty string means the field was present but empty.
    """
    vertices: Sequence[DeltaRecord] = ()
    num_base_mesh_verts: int = 0
    section_indices: Sequence[int] = ()
    generated_by_engine: bool = False
    source_filename: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(self.vertices))
        object.__setattr__(self, "section_indices",
                           tuple(int(i) for i in self.section_indices))

    @classmethod
    def empty(cls) -> "LodMorphPayload":
        return cls()

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def position_deltas(self) -> NDArray[np.float32]:
        """Position offsets as an ``(N, 3)`` float32 array."""
        return np.array([v.position_delta for v in self.vertices],
                        dtype=np.float32).reshape(-1, 3)

    def tangent_z_deltas(self) -> NDArray[np.float32]:
        """Tangent Z offsets as an ``(N, 3)`` float32 array."""
        return np.array([v.tangent_z_delta for v in self.vertices],
                        dtype=np.float32).reshape(-1, 3)

    def source_indices(self) -> NDArray[np.uint32]:
        return np.array([v.source_index for v in self.vertices], dtype=np.uint32)

    def dense_position_deltas(self, vertex_count: int) -> NDArray[np.float32]:
        """Scatter the sparse deltas into a ``(vertex_count, 3)`` array.

        Indices outside ``[0, vertex_count)`` are dropped; untouched
        vertices stay at zero.
        """
        dense = np.zeros((vertex_count, 3), dtype=np.float32)
        idx = self.source_indices()
        keep = idx < vertex_count
        dense[idx[keep]] = self.position_deltas()[keep]
        return dense

    def to_dict(self) -> dict[str, Any]:
        out = {
            "Vertices": [v.to_dict() for v in self.vertices],
            "NumBaseMeshVerts": self.num_base_mesh_verts,
            "SectionIndices": list(self.section_indices),
            "bGeneratedByEngine": self.generated_by_engine,
        }
        if self.source_filename is not None:
            out["SourceFilename"] = self.source_filename
        return out


class MorphLayout(Enum):
    LEGACY = "legacy"
    SECTION_INDICES = "section_indices"
    GAME_VARIANT = "game_variant"
    MAINLINE = "mainline"


class LayoutSelectionError(RuntimeError):
    """No layout in the table accepts the version context."""


# ── Layout predicates ────────────────────────────────────────────────

def _has_section_indices(v: VersionContext) -> bool:
    return v.is_at_least(FeatureStream.EDITOR_OBJECT,
                         EDITOR_ADDED_MORPH_TARGET_SECTION_INDICES)


def _has_generated_flag(v: VersionContext) -> bool:
    return v.is_at_least(FeatureStream.FORTNITE_MAIN,
                         FORTNITE_SAVE_GENERATED_MORPH_TARGET_BY_ENGINE)


def _is_legacy(v: VersionContext) -> bool:
    return not _has_section_indices(v)


def _is_section_aware(v: VersionContext) -> bool:
    return _has_section_indices(v) and not _has_generated_flag(v)


def _is_game_variant(v: VersionContext) -> bool:
    return (_has_section_indices(v) and _has_generated_flag(v)
            and v.game is SECTIONS_ONLY_GAME)


def _is_mainline(v: VersionContext) -> bool:
    return (_has_section_indices(v) and _has_generated_flag(v)
            and v.game is not SECTIONS_ONLY_GAME)


LAYOUT_TABLE: tuple[tuple[Callable[[VersionContext], bool], MorphLayout], ...] = (
    (_is_legacy, MorphLayout.LEGACY),
    (_is_section_aware, MorphLayout.SECTION_INDICES),
    (_is_game_variant, MorphLayout.GAME_VARIANT),
    (_is_mainline, MorphLayout.MAINLINE),
)


def matching_layouts(versions: VersionContext) -> list[MorphLayout]:
    """All layouts whose predicate accepts ``versions``, in table order."""
    return [layout for predicate, layout in LAYOUT_TABLE if predicate(versions)]


def select_layout(versions: VersionContext) -> MorphLayout:
    for predicate, layout in LAYOUT_TABLE:
        if predicate(versions):
            return layout
    raise LayoutSelectionError(
        f"No morph LOD layout matches versions {dict(versions.epochs)} "
        f"(game={versions.game.value})")


# ── Layout bodies ────────────────────────────────────────────────────

def _read_deltas(decoder: "LodMorphDecoder", ar: BinaryArchive) -> list[DeltaRecord]:
    legacy = decoder.tangent_legacy_format
    return ar.read_array(lambda: decode_delta(ar, legacy))


def _decode_legacy(decoder: "LodMorphDecoder", ar: BinaryArchive) -> LodMorphPayload:
    vertices = _read_deltas(decoder, ar)
    return LodMorphPayload(vertices=vertices, num_base_mesh_verts=ar.read_int32())


def _decode_section_indices(decoder: "LodMorphDecoder", ar: BinaryArchive) -> LodMorphPayload:
    vertices = _read_deltas(decoder, ar)
    num_base_mesh_verts = ar.read_int32()
    return LodMorphPayload(
        vertices=vertices,
        num_base_mesh_verts=num_base_mesh_verts,
        section_indices=ar.read_int32_array(),
    )


def _decode_game_variant(decoder: "LodMorphDecoder", ar: BinaryArchive) -> LodMorphPayload:
    ar.skip(_SKIPPED_COUNT_SIZE)
    section_indices = ar.read_int32_array()
    return LodMorphPayload(
        section_indices=section_indices,
        generated_by_engine=ar.read_bool(),
    )


def _decode_mainline(decoder: "LodMorphDecoder", ar: BinaryArchive) -> LodMorphPayload:
    stripped = decoder.has_stripped_flag and ar.read_bool()
    if stripped:
        ar.skip(_SKIPPED_COUNT_SIZE)
        vertices = []
    else:
        vertices = _read_deltas(decoder, ar)
    num_base_mesh_verts = ar.read_int32()
    section_indices = ar.read_int32_array()
    return LodMorphPayload(
        vertices=vertices,
        num_base_mesh_verts=num_base_mesh_verts,
        section_indices=section_indices,
        generated_by_engine=ar.read_bool(),
    )


_LAYOUT_DECODERS = {
    MorphLayout.LEGACY: _decode_legacy,
    MorphLayout.SECTION_INDICES: _decode_section_indices,
    MorphLayout.GAME_VARIANT: _decode_game_variant,
    MorphLayout.MAINLINE: _decode_mainline,
}


class LodMorphDecoder:
    """LOD payload decoder compiled for one version context.

    Version lookups happen here, once; :meth:`decode` only reads the stream.
    """

    def __init__(self, versions: VersionContext):
        self.layout = select_layout(versions)
        self.tangent_legacy_format = False
        self.has_stripped_flag = False
        self.has_source_filename = False

        if self.layout is not MorphLayout.GAME_VARIANT:
            self.tangent_legacy_format = versions.is_before(
                FeatureStream.ENGINE, VER_UE4_MORPHTARGET_CPU_TANGENTZDELTA_FORMATCHANGE)
            self.has_source_filename = versions.is_at_least(
                FeatureStream.FORTNITE_MAIN, FORTNITE_MORPH_TARGET_CUSTOM_IMPORT)
        if self.layout is MorphLayout.MAINLINE:
            self.has_stripped_flag = versions.is_at_least(
                FeatureStream.FROSTY_STREAM,
                FROSTY_STRIP_MORPH_TARGET_SOURCE_DATA_FOR_COOKED_BUILDS)

        self._decode_body = _LAYOUT_DECODERS[self.layout]
        logger.debug(
            "Morph LOD layout %s (legacy tangents=%s, stripped flag=%s, source filename=%s)",
            self.layout.value, self.tangent_legacy_format,
            self.has_stripped_flag, self.has_source_filename)

    def decode(self, ar: BinaryArchive) -> LodMorphPayload:
        payload = self._decode_body(self, ar)
        if self.has_source_filename:
            payload = replace(payload, source_filename=ar.read_fstring())
        logger.debug("Decoded morph LOD: %d deltas, %d base verts, %d sections",
                     payload.vertex_count, payload.num_base_mesh_verts,
                     len(payload.section_indices))
        return payload


def decode_lod_model(ar: BinaryArchive) -> LodMorphPayload:
    """Decode one LOD payload using the archive's version context."""
    return LodMorphDecoder(ar.versions).decode(ar)
