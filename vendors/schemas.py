"""
Pydantic schemas for normalized source output - runtime validation at boundaries.

Every adapter builds its meetings through these models before the document is
persisted, so a malformed date or a string sequence fails at the adapter
instead of leaking into the combined file the frontend reads.
"""

from datetime import date as calendar_date
from typing import Optional, List, Dict, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


MeetingStatus = Literal["upcoming", "past", "projected"]


class AttachmentSchema(BaseModel):
    """Matter attachment owned by a single agenda item"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    url: Optional[str] = None
    binary_url: Optional[str] = None


class CountyGeoTags(BaseModel):
    """Geographic references found in a Commissioners Court item title"""
    model_config = ConfigDict(extra="forbid")

    precincts: List[str] = Field(default_factory=list)
    addresses: List[str] = Field(default_factory=list)
    areas: List[str] = Field(default_factory=list)
    flood_control: bool = False

    def is_tagged(self) -> bool:
        # Named areas alone are too noisy ("Spring" matches springtime) to count
        return bool(self.precincts or self.addresses or self.flood_control)


class SchoolGeoTags(BaseModel):
    """Trustee districts, campuses and addresses found in a board item title"""
    model_config = ConfigDict(extra="forbid")

    trustee_districts: List[str] = Field(default_factory=list)
    schools: List[str] = Field(default_factory=list)
    addresses: List[str] = Field(default_factory=list)

    def is_tagged(self) -> bool:
        return bool(self.trustee_districts or self.schools or self.addresses)


class TransitGeoTags(BaseModel):
    """Routes, lines and service areas found in a transit board item title"""
    model_config = ConfigDict(extra="forbid")

    routes: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)

    def is_tagged(self) -> bool:
        return bool(self.routes or self.locations)


GeoTagSet = Union[CountyGeoTags, SchoolGeoTags, TransitGeoTags]


class AgendaItemSchema(BaseModel):
    """Agenda item - common shape across sources, source extras allowed"""
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    agenda_number: Optional[Union[int, str]] = None
    title: str = ""
    type: Optional[str] = None
    consent: bool = False
    attachments: List[AttachmentSchema] = Field(default_factory=list)
    geographic_tags: GeoTagSet


class MeetingSchema(BaseModel):
    """Meeting - one governing-body session"""
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    date: str  # YYYY-MM-DD, no time component
    time: str = ""
    body: str = ""
    location: str = ""
    agenda_url: Optional[str] = None
    detail_url: Optional[str] = None
    status: MeetingStatus
    agenda_items: List[AgendaItemSchema] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def validate_calendar_date(cls, v: Any) -> str:
        """Ensure date is a real zero-padded calendar date"""
        if not isinstance(v, str):
            raise ValueError(f"Meeting 'date' must be string, got {type(v)}")
        try:
            parsed = calendar_date.fromisoformat(v)
        except ValueError as e:
            raise ValueError(f"Invalid ISO date string: {v}") from e
        if parsed.isoformat() != v:
            raise ValueError(f"Meeting 'date' must be YYYY-MM-DD, got {v}")
        return v


class SourceDocument(BaseModel):
    """Envelope for one live upstream source"""
    model_config = ConfigDict(extra="allow")

    source: str
    fetched_at: str
    meetings: List[MeetingSchema] = Field(default_factory=list)
    summary: Dict[str, int] = Field(default_factory=dict)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class StaleSourceDocument(BaseModel):
    """Envelope for a source we can only age, never refresh

    Meetings are carried exactly as last persisted (often hand-curated), so
    they are not re-validated against MeetingSchema.
    """
    model_config = ConfigDict(extra="allow")

    source: str
    fetched_at: str
    stale: bool
    stale_days: int
    last_refresh_attempt: str
    note: str
    meetings: List[Any] = Field(default_factory=list)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class ErrorPlaceholder(BaseModel):
    """Stands in for a source whose persisted document could not be loaded"""
    model_config = ConfigDict(extra="forbid")

    source: str
    fetched_at: None = None
    error: str
    meetings: List[Any] = Field(default_factory=list)


class CombinedDocument(BaseModel):
    """Top-level document the frontend consumes"""
    model_config = ConfigDict(extra="forbid")

    fetched_at: str
    sources: Dict[str, Dict[str, Any]]

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def validate_meeting_output(meeting_dict: Dict[str, Any]) -> MeetingSchema:
    """
    Validate adapter meeting output against schema.

    Args:
        meeting_dict: Raw meeting dict built by an adapter

    Returns:
        Validated MeetingSchema

    Raises:
        pydantic.ValidationError: If data doesn't match schema
    """
    return MeetingSchema(**meeting_dict)
