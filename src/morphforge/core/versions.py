"""Version context and feature gates for versioned binary layouts.

A stream carries several independently versioned feature streams (the
global engine object version plus per-subsystem custom versions), an
optional game variant, and boolean registry options.  Decoders ask the
context whether a given epoch has been reached; they never inspect the raw
numbers themselves.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from morphforge.constants import MORPH_TARGET_OPTION


class FeatureStream(Enum):
    ENGINE = "Engine"
    EDITOR_OBJECT = "EditorObject"
    FORTNITE_MAIN = "FortniteMainBranch"
    FROSTY_STREAM = "UE5PrivateFrostyStream"


class Game(Enum):
    GENERIC = "generic"
    THE_CASTING_OF_FRANK_STONE = "the_casting_of_frank_stone"


class UnresolvedVersionError(KeyError):
    """A feature stream or option was queried that the context does not carry."""


@dataclass(frozen=True)
class VersionContext:
    """Resolved version epochs for one decode call.

    epochs: feature stream -> integer epoch
    game: active game variant
    options: registry option name -> enabled
    """
    epochs: Mapping[FeatureStream, int]
    game: Game = Game.GENERIC
    options: Mapping[str, bool] = field(
        default_factory=lambda: {MORPH_TARGET_OPTION: True})

    def __post_init__(self):
        object.__setattr__(self, "epochs", MappingProxyType(dict(self.epochs)))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def get(self, stream: FeatureStream) -> int:
        try:
            return self.epochs[stream]
        except KeyError:
            raise UnresolvedVersionError(
                f"Feature stream {stream.value!r} is not resolved in this context") from None

    def is_at_least(self, stream: FeatureStream, threshold: int) -> bool:
        return self.get(stream) >= threshold

    def is_before(self, stream: FeatureStream, threshold: int) -> bool:
        return not self.is_at_least(stream, threshold)

    def option(self, name: str) -> bool:
        try:
            return self.options[name]
        except KeyError:
            raise UnresolvedVersionError(
                f"Registry option {name!r} is not resolved in this context") from None

    def with_game(self, game: Game) -> "VersionContext":
        return VersionContext(epochs=self.epochs, game=game, options=self.options)

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "VersionContext":
        """Build a context from one entry of ``version_profiles.json``.

        Expected keys: ``engine`` (int), ``custom_versions`` (stream name ->
        int), optional ``game`` and ``options``.
        """
        epochs = {FeatureStream.ENGINE: int(data["engine"])}
        for name, value in data.get("custom_versions", {}).items():
            epochs[FeatureStream(name)] = int(value)
        options = {MORPH_TARGET_OPTION: True}
        options.update({k: bool(v) for k, v in data.get("options", {}).items()})
        return cls(
            epochs=epochs,
            game=Game(data.get("game", Game.GENERIC.value)),
            options=options,
        )
