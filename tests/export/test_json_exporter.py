"""Tests for JSON export of morph targets."""

import json

from morphforge.export.json_exporter import export_json, morph_target_to_json
from morphforge.loaders.morph_delta import DeltaRecord
from morphforge.loaders.morph_lod import LodMorphPayload
from morphforge.loaders.morph_target import MorphTarget


def _asset():
    asset = MorphTarget("Blink")
    asset.lod_models = (
        LodMorphPayload(
            vertices=[DeltaRecord((0.5, 0.0, 0.0), (0.0, 0.0, 1.0), 3)],
            num_base_mesh_verts=12,
            section_indices=[0],
            generated_by_engine=True,
            source_filename="blink.fbx",
        ),
        LodMorphPayload(num_base_mesh_verts=6),
    )
    return asset


def test_field_names():
    doc = json.loads(morph_target_to_json(_asset()))
    assert doc["Type"] == "MorphTarget"
    assert doc["Name"] == "Blink"
    lod0, lod1 = doc["MorphLODModels"]
    assert lod0 == {
        "Vertices": [{
            "PositionDelta": {"X": 0.5, "Y": 0.0, "Z": 0.0},
            "TangentZDelta": {"X": 0.0, "Y": 0.0, "Z": 1.0},
            "SourceIdx": 3,
        }],
        "NumBaseMeshVerts": 12,
        "SectionIndices": [0],
        "bGeneratedByEngine": True,
        "SourceFilename": "blink.fbx",
    }
    # Absent filename is omitted, not emitted as ""
    assert "SourceFilename" not in lod1


def test_export_json(tmp_path):
    path = tmp_path / "blink.json"
    assert export_json(_asset(), path) == 2
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert len(doc["MorphLODModels"]) == 2


def test_compact_output():
    text = morph_target_to_json(MorphTarget(), indent=None)
    assert "\n" not in text
    assert json.loads(text)["MorphLODModels"][0]["Vertices"] == []
