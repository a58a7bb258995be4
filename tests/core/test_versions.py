"""Tests for version contexts and feature gates."""

import pytest

from morphforge.core.versions import (
    FeatureStream, Game, UnresolvedVersionError, VersionContext,
)


def _ctx(**kw):
    return VersionContext({FeatureStream.ENGINE: 500, FeatureStream.EDITOR_OBJECT: 23}, **kw)


def test_is_at_least_boundary():
    ctx = _ctx()
    assert ctx.is_at_least(FeatureStream.EDITOR_OBJECT, 23)
    assert ctx.is_at_least(FeatureStream.EDITOR_OBJECT, 22)
    assert not ctx.is_at_least(FeatureStream.EDITOR_OBJECT, 24)


def test_is_before_is_negation():
    ctx = _ctx()
    for threshold in (0, 499, 500, 501):
        assert ctx.is_before(FeatureStream.ENGINE, threshold) == (
            not ctx.is_at_least(FeatureStream.ENGINE, threshold))


def test_unresolved_stream_fails_fast():
    ctx = _ctx()
    with pytest.raises(UnresolvedVersionError):
        ctx.is_at_least(FeatureStream.FROSTY_STREAM, 1)
    # Programming error, not a decode error: still a KeyError
    with pytest.raises(KeyError):
        ctx.get(FeatureStream.FORTNITE_MAIN)


def test_default_options_enable_morph_targets():
    ctx = _ctx()
    assert ctx.option("MorphTarget") is True
    with pytest.raises(UnresolvedVersionError):
        ctx.option("SkeletalMesh")


def test_context_is_read_only():
    epochs = {FeatureStream.ENGINE: 500}
    ctx = VersionContext(epochs)
    epochs[FeatureStream.ENGINE] = 1
    assert ctx.get(FeatureStream.ENGINE) == 500
    with pytest.raises(TypeError):
        ctx.epochs[FeatureStream.ENGINE] = 2


def test_with_game():
    ctx = _ctx()
    variant = ctx.with_game(Game.THE_CASTING_OF_FRANK_STONE)
    assert variant.game is Game.THE_CASTING_OF_FRANK_STONE
    assert ctx.game is Game.GENERIC
    assert variant.get(FeatureStream.ENGINE) == 500


def test_from_config():
    ctx = VersionContext.from_config({
        "engine": 522,
        "custom_versions": {"FortniteMainBranch": 130, "EditorObject": 46},
        "game": "the_casting_of_frank_stone",
        "options": {"MorphTarget": False},
    })
    assert ctx.get(FeatureStream.ENGINE) == 522
    assert ctx.get(FeatureStream.FORTNITE_MAIN) == 130
    assert ctx.game is Game.THE_CASTING_OF_FRANK_STONE
    assert ctx.option("MorphTarget") is False


def test_from_config_defaults():
    ctx = VersionContext.from_config({"engine": 300})
    assert ctx.game is Game.GENERIC
    assert ctx.option("MorphTarget") is True
