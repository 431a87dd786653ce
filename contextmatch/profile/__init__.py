"""Profile module for member context windows."""

from contextmatch.profile.models import (
    ONBOARDING_COMPLETENESS,
    ContextWindow,
    OpenTo,
)

__all__ = [
    "ONBOARDING_COMPLETENESS",
    "ContextWindow",
    "OpenTo",
]
