# src/attainment/models/team.py
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .enums import SourceFeed


class CanonicalTeam(BaseModel):
    """A de-aliased team identity and the spellings each feed uses for it."""

    model_config = ConfigDict(frozen=True)

    id: str
    aliases_by_source: Dict[SourceFeed, List[str]] = Field(default_factory=dict)
