"""
Tests for the engine registry.
"""
import pytest

from engines import ENGINE_MAP, IqdbEngine, SauceNaoEngine, get_engine


@pytest.mark.parametrize("name,engine_class", [
    ("saucenao", SauceNaoEngine),
    ("SauceNAO", SauceNaoEngine),
    (" iqdb ", IqdbEngine),
])
def test_get_engine_by_name(name, engine_class):
    assert isinstance(get_engine(name), engine_class)


def test_get_engine_passes_settings():
    engine = get_engine("saucenao", api_key="secret", user_agent="TestAgent/1.0", timeout=5)
    assert engine.api_key == "secret"
    assert engine.user_agent == "TestAgent/1.0"
    assert engine.timeout.total == 5


def test_get_engine_unknown_name():
    assert get_engine("google") is None
    assert "google" not in ENGINE_MAP
