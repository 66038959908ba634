"""Reverse image search engines."""

from typing import Optional

from .base import BaseEngine
from .iqdb import IqdbEngine, parse_results
from .saucenao import SauceNaoEngine, normalize_results

# Map engine names to their classes
ENGINE_MAP = {
    "saucenao": SauceNaoEngine,
    "iqdb": IqdbEngine,
}


def get_engine(name: str, **kwargs) -> Optional[BaseEngine]:
    """
    Get an engine instance by name.
    Returns None if no engine is registered under that name.
    """
    engine_class = ENGINE_MAP.get(name.lower().strip())
    if engine_class is None:
        return None
    return engine_class(**kwargs)


__all__ = [
    "BaseEngine",
    "SauceNaoEngine",
    "IqdbEngine",
    "get_engine",
    "normalize_results",
    "parse_results",
    "ENGINE_MAP",
]
