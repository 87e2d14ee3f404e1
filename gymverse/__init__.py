# File: __init__.py
"""Initialization file for the GymVerse progression engine.

Exposes the stateful entry points. Pure calculation engines live in
``gymverse.engines`` and can be used without a store.

Key Features:
- ProgressionStore for persistent progression data.
- ProgressionManager for workout, event and challenge workflows.
- Catalog loaders validating achievement templates and challenges.
"""

from __future__ import annotations

from .catalog import (
    CatalogError,
    get_default_achievement_catalog,
    load_achievement_catalog,
    load_challenge_catalog,
)
from .managers import ProgressionManager
from .store import ProgressionStore

__all__ = [
    "CatalogError",
    "ProgressionManager",
    "ProgressionStore",
    "get_default_achievement_catalog",
    "load_achievement_catalog",
    "load_challenge_catalog",
]
