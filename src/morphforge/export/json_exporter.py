"""Export decoded morph targets as JSON.

Field names follow the engine's property names (``MorphLODModels``,
``Vertices``, ``NumBaseMeshVerts``, ...) so snapshots stay comparable with
other tools.
"""

import json
import logging
from pathlib import Path

from morphforge.loaders.morph_target import MorphTarget

logger = logging.getLogger(__name__)


def morph_target_to_json(asset: MorphTarget, indent: int | None = 2) -> str:
    return json.dumps(asset.to_dict(), indent=indent)


def export_json(asset: MorphTarget, path: str | Path, indent: int | None = 2) -> int:
    """Write ``asset`` to ``path`` as UTF-8 JSON.

    Returns
    -------
    int
        Number of LOD payloads written.
    """
    path = Path(path)
    path.write_text(morph_target_to_json(asset, indent=indent), encoding="utf-8")
    logger.info("Exported %d morph LODs to %s", len(asset.lod_models), path)
    return len(asset.lod_models)
