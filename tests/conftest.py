"""
Pytest configuration and shared fixtures.
"""

from typing import Dict, List

import pytest

from contextmatch.profile.models import ContextWindow


@pytest.fixture
def builder_context() -> ContextWindow:
    """Backend engineer looking for a designer, no embedding."""
    return ContextWindow(
        user_id="builder",
        skills=["Rust", "Go"],
        seeking="need a designer",
        open_to=["collaborations"],
    )


@pytest.fixture
def designer_context() -> ContextWindow:
    """Designer looking for a backend engineer, no embedding."""
    return ContextWindow(
        user_id="designer",
        skills=["Design"],
        seeking="need a backend engineer",
        open_to=["collaborations"],
    )


@pytest.fixture
def me() -> ContextWindow:
    """Member the candidate pool is ranked for."""
    return ContextWindow(
        user_id="me",
        working_on="A developer tools startup",
        skills=["Python"],
        open_to=["collaborations"],
        embedding=[1.0, 0.0],
    )


@pytest.fixture
def candidate_pool(me) -> List[ContextWindow]:
    """
    Pool with known scores against `me`:

    alice 0.75, bob 0.55, dave 0.55 (after bob), carol 0.35,
    erin has no embedding, me is included to check self-exclusion.
    """
    return [
        me,
        ContextWindow(
            user_id="carol",
            working_on="Climate research",
            open_to=["collaborations"],
            embedding=[0.0, 1.0],
        ),
        ContextWindow(
            user_id="bob",
            working_on="A payments app",
            open_to=["collaborations"],
            embedding=[1.0, 0.0],
        ),
        ContextWindow(
            user_id="alice",
            working_on="Data pipelines",
            skills=["python"],
            open_to=["collaborations"],
            embedding=[1.0, 0.0],
        ),
        ContextWindow(
            user_id="dave",
            working_on="A robotics lab",
            open_to=["collaborations"],
            embedding=[1.0, 0.0],
        ),
        ContextWindow(
            user_id="erin",
            working_on="A newsletter",
            skills=["Python"],
            open_to=["collaborations"],
        ),
    ]


@pytest.fixture
def communities() -> Dict[str, List[str]]:
    """Community memberships: me and dave share one community."""
    return {
        "me": ["network-school", "ef-cohort"],
        "dave": ["network-school"],
        "bob": [],
        "alice": ["founders-club"],
    }
