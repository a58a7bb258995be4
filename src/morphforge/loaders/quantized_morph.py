"""Rebuild LOD morph payloads from quantized GPU morph buffers.

The GPU buffer groups each morph target's deltas into batches.  A batch
stores integer offsets relative to a per-batch minimum; the buffer holds
one global precision scalar for positions and one for tangents:

    value = (batch_min + quantized_offset) * precision

The sum is integer, the product is float32.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from morphforge.loaders.morph_delta import DeltaRecord
from morphforge.loaders.morph_lod import LodMorphPayload

logger = logging.getLogger(__name__)

IntVec3 = tuple[int, int, int]


class QuantizedBufferError(IndexError):
    """Batch entry counts disagree with the declared element counts."""


@dataclass(frozen=True)
class QuantizedDelta:
    position: IntVec3
    tangent_z: IntVec3
    index: int


@dataclass(frozen=True)
class MorphBatch:
    num_elements: int
    position_min: IntVec3
    tangent_z_min: IntVec3
    quantized_deltas: Sequence[QuantizedDelta]


@dataclass(frozen=True)
class QuantizedMorphBuffer:
    """Unpacked quantized morph buffer shared by all morph targets of a LOD."""
    batches: Sequence[MorphBatch]
    batch_start_offset_per_morph: Sequence[int]
    batches_per_morph: Sequence[int]
    position_precision: float
    tangent_z_precision: float

    def batches_for(self, morph_index: int) -> list[MorphBatch]:
        """Batches of one morph target, in buffer order.

        Offsets past the end of ``batches`` raise IndexError.
        """
        start = self.batch_start_offset_per_morph[morph_index]
        count = self.batches_per_morph[morph_index]
        return [self.batches[start + j] for j in range(count)]


def dequantize(minimum: NDArray, offsets: NDArray, precision: float) -> NDArray[np.float32]:
    """``(minimum + offsets) * precision`` with an integer sum and float32 product."""
    summed = np.asarray(minimum, dtype=np.int64) + np.asarray(offsets, dtype=np.int64)
    return summed.astype(np.float32) * np.float32(precision)


def _dequantize_batch(batch: MorphBatch, pos_precision: float,
                      tan_precision: float) -> list[DeltaRecord]:
    entries = batch.quantized_deltas
    if not entries:
        return []
    pos_q = np.array([e.position for e in entries], dtype=np.int64)
    tan_q = np.array([e.tangent_z for e in entries], dtype=np.int64)
    positions = dequantize(batch.position_min, pos_q, pos_precision)
    tangents = dequantize(batch.tangent_z_min, tan_q, tan_precision)
    return [
        DeltaRecord(tuple(float(c) for c in pos), tuple(float(c) for c in tan), int(e.index))
        for pos, tan, e in zip(positions, tangents, entries)
    ]


def reconstruct_lod_model(buffer: QuantizedMorphBuffer, morph_index: int,
                          section_indices: Sequence[int]) -> LodMorphPayload:
    """Build the LOD payload of morph target ``morph_index`` from ``buffer``.

    Deltas are emitted batch by batch, preserving the order of entries
    within each batch.  The base vertex count equals the reconstructed
    delta count, and section indices are taken verbatim from the caller.
    """
    batches = buffer.batches_for(morph_index)
    size = sum(int(batch.num_elements) for batch in batches)

    vertices: list[DeltaRecord] = []
    for batch in batches:
        vertices.extend(_dequantize_batch(
            batch, buffer.position_precision, buffer.tangent_z_precision))
        if len(vertices) > size:
            raise QuantizedBufferError(
                f"Morph {morph_index}: batches hold more entries than the "
                f"{size} declared elements")
    if len(vertices) != size:
        raise QuantizedBufferError(
            f"Morph {morph_index}: {len(vertices)} entries for {size} declared elements")

    logger.debug("Reconstructed morph %d from %d batches: %d deltas",
                 morph_index, len(batches), size)
    return LodMorphPayload(
        vertices=vertices,
        num_base_mesh_verts=size,
        section_indices=section_indices,
        generated_by_engine=False,
    )
