"""Shared constants and paths for MorphForge."""

from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"
CONFIG_DIR = ASSETS_DIR / "config"
VERSION_PROFILES_FILE = "version_profiles.json"

# Engine (UE4 object) versions
VER_UE4_REMOVED_STRIP_DATA = 130
VER_UE4_MORPHTARGET_CPU_TANGENTZDELTA_FORMATCHANGE = 348

# FEditorObjectVersion
EDITOR_ADDED_MORPH_TARGET_SECTION_INDICES = 23

# FFortniteMainBranchObjectVersion
FORTNITE_SAVE_GENERATED_MORPH_TARGET_BY_ENGINE = 6
FORTNITE_MORPH_TARGET_CUSTOM_IMPORT = 115

# FUE5PrivateFrostyStreamObjectVersion
FROSTY_STRIP_MORPH_TARGET_SOURCE_DATA_FOR_COOKED_BUILDS = 7

# Registry option that gates the whole morph target payload
MORPH_TARGET_OPTION = "MorphTarget"

# FStripDataFlags global bits
STRIP_EDITOR = 1
STRIP_SERVER = 2

# Legacy packed normal: byte * (1 / 127.5) - 1, multiply then add in float32
PACKED_NORMAL_SCALE = 1.0 / 127.5
PACKED_NORMAL_BIAS = -1.0
