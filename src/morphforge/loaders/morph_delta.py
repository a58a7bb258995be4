"""Single morph vertex delta: position offset, tangent Z offset, source vertex."""

import struct
from dataclasses import dataclass
from typing import Any

import numpy as np

from morphforge.constants import PACKED_NORMAL_BIAS, PACKED_NORMAL_SCALE
from morphforge.core.archive import BinaryArchive

Vec3 = tuple[float, float, float]

_DELTA = struct.Struct("<3f3fI")


@dataclass(frozen=True)
class DeltaRecord:
    """One vertex offset applied to the base mesh.

    source_index is not range-checked against the base mesh.
    """
    position_delta: Vec3
    tangent_z_delta: Vec3
    source_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "PositionDelta": _vec3_dict(self.position_delta),
            "TangentZDelta": _vec3_dict(self.tangent_z_delta),
            "SourceIdx": self.source_index,
        }


def _vec3_dict(v: Vec3) -> dict[str, float]:
    return {"X": v[0], "Y": v[1], "Z": v[2]}


def unpack_legacy_normal(packed: int) -> Vec3:
    """Expand a deprecated 32-bit packed normal to float32 components.

    Bytes 0..2 hold X, Y, Z as ``b * (1 / 127.5) + (-1)``, a float32
    multiply followed by a float32 add; byte 3 is unused.
    """
    raw = np.array([packed & 0xFF, (packed >> 8) & 0xFF, (packed >> 16) & 0xFF],
                   dtype=np.float32)
    out = raw * np.float32(PACKED_NORMAL_SCALE) + np.float32(PACKED_NORMAL_BIAS)
    return tuple(float(c) for c in out)


def decode_delta(ar: BinaryArchive, tangent_legacy_format: bool) -> DeltaRecord:
    """Read position (3 x f32), tangent, then the uint32 source index."""
    position = ar.read_vector3()
    if tangent_legacy_format:
        tangent = unpack_legacy_normal(ar.read_uint32())
    else:
        tangent = ar.read_vector3()
    return DeltaRecord(position, tangent, ar.read_uint32())


def encode_delta(record: DeltaRecord) -> bytes:
    """Serialize a record in the current (full float tangent) layout."""
    return _DELTA.pack(*record.position_delta, *record.tangent_z_delta,
                       record.source_index)
