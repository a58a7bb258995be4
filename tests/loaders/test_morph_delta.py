"""Tests for the morph delta record codec."""

import struct

import numpy as np
import pytest

from morphforge.core.archive import ArchiveEOFError, BinaryArchive
from morphforge.core.versions import FeatureStream, VersionContext
from morphforge.loaders.morph_delta import (
    DeltaRecord, decode_delta, encode_delta, unpack_legacy_normal,
)


def _archive(data: bytes) -> BinaryArchive:
    return BinaryArchive(data, VersionContext({FeatureStream.ENGINE: 522}))


def test_decode_full_tangent():
    data = struct.pack("<3f3fI", 1.0, -2.5, 0.125, 0.0, 0.5, -1.0, 42)
    rec = decode_delta(_archive(data), tangent_legacy_format=False)
    assert rec.position_delta == (1.0, -2.5, 0.125)
    assert rec.tangent_z_delta == (0.0, 0.5, -1.0)
    assert rec.source_index == 42


def test_decode_legacy_packed_tangent():
    # X=255, Y=0, Z=255, W ignored
    data = struct.pack("<3fII", 1.0, 2.0, 3.0, 0x80FF00FF, 7)
    ar = _archive(data)
    rec = decode_delta(ar, tangent_legacy_format=True)
    assert rec.position_delta == (1.0, 2.0, 3.0)
    assert rec.tangent_z_delta == (1.0, -1.0, 1.0)
    assert rec.source_index == 7
    assert ar.position == 20


def test_unpack_legacy_normal_multiply_add_for_every_byte():
    scale = np.float32(1.0 / 127.5)
    bias = np.float32(-1.0)
    mismatched = []
    for b in range(256):
        expected = float(np.float32(np.float32(b) * scale) + bias)
        packed = b | (b << 8) | (b << 16)
        if unpack_legacy_normal(packed) != (expected, expected, expected):
            mismatched.append(b)
    assert mismatched == []


def test_unpack_legacy_normal_known_values():
    assert unpack_legacy_normal(0x00000030)[0] == -0.6235293745994568
    assert unpack_legacy_normal(0x00FF00FF) == (1.0, -1.0, 1.0)


def test_round_trip_is_bit_exact():
    values = np.array([0.1, -3.3, 1e-7, 12345.678, -0.0, 2.2], dtype=np.float32)
    rec = DeltaRecord(tuple(float(v) for v in values[:3]),
                      tuple(float(v) for v in values[3:]), 0xFFFFFFFE)
    out = decode_delta(_archive(encode_delta(rec)), tangent_legacy_format=False)
    assert out == rec
    assert np.array(out.position_delta, dtype=np.float32).tobytes() == values[:3].tobytes()
    assert np.array(out.tangent_z_delta, dtype=np.float32).tobytes() == values[3:].tobytes()


def test_truncated_record_propagates():
    data = struct.pack("<3f3f", 1, 2, 3, 4, 5, 6)
    with pytest.raises(ArchiveEOFError):
        decode_delta(_archive(data), tangent_legacy_format=False)


def test_to_dict():
    rec = DeltaRecord((1.0, 2.0, 3.0), (0.0, 0.0, 1.0), 5)
    assert rec.to_dict() == {
        "PositionDelta": {"X": 1.0, "Y": 2.0, "Z": 3.0},
        "TangentZDelta": {"X": 0.0, "Y": 0.0, "Z": 1.0},
        "SourceIdx": 5,
    }
