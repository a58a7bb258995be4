"""Morph target loaders -- versioned LOD payloads and quantized GPU buffers."""

from morphforge.loaders.morph_delta import DeltaRecord, decode_delta, encode_delta
from morphforge.loaders.morph_lod import (
    LayoutSelectionError,
    LodMorphDecoder,
    LodMorphPayload,
    MorphLayout,
    decode_lod_model,
)
from morphforge.loaders.morph_target import (
    AssetDecodeError,
    MorphTarget,
    decode_morph_target,
    load_morph_target,
    load_morph_target_file,
)
from morphforge.loaders.quantized_morph import (
    MorphBatch,
    QuantizedDelta,
    QuantizedMorphBuffer,
    reconstruct_lod_model,
)

__all__ = [
    "AssetDecodeError",
    "DeltaRecord",
    "LayoutSelectionError",
    "LodMorphDecoder",
    "LodMorphPayload",
    "MorphBatch",
    "MorphLayout",
    "MorphTarget",
    "QuantizedDelta",
    "QuantizedMorphBuffer",
    "decode_delta",
    "decode_lod_model",
    "decode_morph_target",
    "encode_delta",
    "load_morph_target",
    "load_morph_target_file",
    "reconstruct_lod_model",
]
