"""Manager modules for GymVerse progression.

Managers orchestrate workflows and coordinate between engines.
They are stateful and own every write to the progression store.
"""

from .progression_manager import ProgressionManager

__all__ = [
    "ProgressionManager",
]
