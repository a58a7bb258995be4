"""Base exported object: name, property bag and the first decode step."""

from typing import Any

from morphforge.core.archive import BinaryArchive


class UObject:
    """Common base for decoded exports.

    The property bag is parsed by the archive's ``property_reader`` hook;
    without one, nothing is consumed from the stream.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.properties: dict[str, Any] = {}

    def deserialize(self, ar: BinaryArchive, valid_pos: int) -> None:
        if ar.property_reader is not None:
            self.properties = dict(ar.property_reader(ar))

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": type(self).__name__,
            "Name": self.name,
            "Properties": dict(self.properties),
        }
