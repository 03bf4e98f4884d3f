"""Team roster models."""

from typing import Optional

from pydantic import AwareDatetime, BaseModel, Field


class TeamMember(BaseModel):
    """A person eligible for team-based assignment.

    ``id`` is the membership row; ``person_id`` is the identity stored as
    the assignee on reservations.
    """
    id: str
    person_id: str
    team_id: str
    name: str = ""
    skills: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    active: bool = True
    last_assigned_at: Optional[AwareDatetime] = None
    calendar_sync_enabled: bool = False

    @property
    def is_eligible(self) -> bool:
        """Inactive members and members without calendar sync are never assigned."""
        return self.active and self.calendar_sync_enabled
