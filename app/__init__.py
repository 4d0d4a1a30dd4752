"""Audio Lounge: podcast catalog, favorites and playback-progress session API."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_LAZY_EXPORTS = {
    "app": "app.main",
    "create_app": "app.main",
    "ListeningSession": "app.services.session",
}

__all__ = list(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    # The FastAPI app reads settings on import, so defer it until requested.
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'app' has no attribute {name}")
    return getattr(import_module(module_name), name)
