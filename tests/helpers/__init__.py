"""Test helpers for GymVerse tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import (
        make_session, make_history, make_entry, make_challenge,
        generate_demo_leaderboard,
    )

See individual modules for full documentation:
- fixtures.py: Builders for sessions, challenges and leaderboard entries
"""

from tests.helpers.fixtures import (
    FIXED_NOW,
    generate_demo_leaderboard,
    make_challenge,
    make_entry,
    make_history,
    make_session,
)

__all__ = [
    "FIXED_NOW",
    "generate_demo_leaderboard",
    "make_challenge",
    "make_entry",
    "make_history",
    "make_session",
]
