"""Pydantic models for member context windows."""

from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field, field_validator


class OpenTo(str, Enum):
    """Connection types a member is open to."""

    COLLABORATIONS = "collaborations"
    ADVICE = "advice"
    MENTORSHIP = "mentorship"
    COFOUNDING = "cofounding"
    HIRING = "hiring"
    INVESTMENT = "investment"
    FRIENDSHIP = "friendship"


# Share of filled fields needed before onboarding counts as complete
ONBOARDING_COMPLETENESS = 0.6


class ContextWindow(BaseModel):
    """A member's profile as seen by the matching engine."""

    user_id: str = Field(..., description="Opaque user identifier")
    working_on: Optional[str] = Field(None, max_length=2000, description="What they're building")
    skills: List[str] = Field(default_factory=list, max_length=20, description="Skills and expertise")
    seeking: Optional[str] = Field(None, max_length=2000, description="Who they want to meet")
    bio: Optional[str] = Field(None, max_length=500, description="Short bio")
    current_location: Optional[str] = Field(None, max_length=100, description="Where they are now")
    upcoming_travel: List[str] = Field(
        default_factory=list, max_length=10, description="Upcoming trips and events"
    )
    open_to: Set[OpenTo] = Field(default_factory=set, description="Connection types")
    embedding: Optional[List[float]] = Field(
        None, description="Semantic vector from the embedding provider"
    )

    @field_validator("skills", "upcoming_travel", "open_to", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        # Stored records may carry nulls for never-filled lists
        if value is None:
            return []
        return value

    @field_validator("skills")
    @classmethod
    def _check_skill_length(cls, value: List[str]) -> List[str]:
        for skill in value:
            if len(skill) > 50:
                raise ValueError(f"Skill too long (max 50 chars): {skill[:20]}...")
        return value

    @field_validator("upcoming_travel")
    @classmethod
    def _check_travel_length(cls, value: List[str]) -> List[str]:
        for trip in value:
            if len(trip) > 100:
                raise ValueError(f"Travel entry too long (max 100 chars): {trip[:20]}...")
        return value

    @property
    def has_embedding(self) -> bool:
        """True once the embedding provider has filled in a vector."""
        return bool(self.embedding)

    def completeness(self) -> float:
        """Fraction of the five profile fields that are filled (0.0-1.0)."""
        fields = [
            bool(self.working_on),
            len(self.skills) > 0,
            bool(self.seeking),
            bool(self.bio),
            len(self.open_to) > 0,
        ]
        return sum(fields) / len(fields)

    def has_completed_onboarding(self) -> bool:
        """Check if enough of the profile is filled in to start matching."""
        return self.completeness() >= ONBOARDING_COMPLETENESS

    def to_embedding_text(self) -> str:
        """Combine profile fields into the text sent for embedding.

        Returns:
            Labelled sections separated by blank lines.

        Raises:
            ValueError: If the profile has nothing to embed.
        """
        parts = []

        if self.working_on:
            parts.append(f"Currently working on: {self.working_on}")
        if self.skills:
            parts.append(f"Skills and expertise: {', '.join(self.skills)}")
        if self.seeking:
            parts.append(f"Looking for: {self.seeking}")
        if self.bio:
            parts.append(f"About: {self.bio}")
        if self.current_location:
            parts.append(f"Based in: {self.current_location}")
        if self.open_to:
            # Sets have no order; keep the vocabulary order for stable text
            tags = [tag.value for tag in OpenTo if tag in self.open_to]
            parts.append(f"Open to: {', '.join(tags)}")

        text = "\n\n".join(parts)
        if not text.strip():
            raise ValueError("Context is empty, cannot build embedding text")
        return text

    def get_summary(self) -> dict:
        """Get a summary of key profile attributes for display."""
        return {
            "user_id": self.user_id,
            "working_on": self.working_on,
            "skills": self.skills,
            "location": self.current_location,
            "open_to": sorted(tag.value for tag in self.open_to),
            "has_embedding": self.has_embedding,
            "completion": f"{self.completeness() * 100:.0f}%",
        }
