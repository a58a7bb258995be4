"""Strip-data flags record preceding cooked payloads."""

from dataclasses import dataclass

from morphforge.constants import STRIP_EDITOR, STRIP_SERVER, VER_UE4_REMOVED_STRIP_DATA
from morphforge.core.archive import BinaryArchive
from morphforge.core.versions import FeatureStream


@dataclass(frozen=True)
class StripDataFlags:
    global_flags: int = 0
    class_flags: int = 0

    @classmethod
    def read(cls, ar: BinaryArchive) -> "StripDataFlags":
        if ar.versions.is_before(FeatureStream.ENGINE, VER_UE4_REMOVED_STRIP_DATA):
            return cls()
        return cls(global_flags=ar.read_uint8(), class_flags=ar.read_uint8())

    def is_editor_data_stripped(self) -> bool:
        return bool(self.global_flags & STRIP_EDITOR)

    def is_data_stripped_for_server(self) -> bool:
        return bool(self.global_flags & STRIP_SERVER)

    def is_class_data_stripped(self, flag: int) -> bool:
        return bool(self.class_flags & flag)
