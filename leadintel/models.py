"""Pydantic models for structured data throughout the pipeline."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer

UNKNOWN = "Unknown"

T = TypeVar("T")


class AcquiredContent(BaseModel):
    """Snapshot of a single scrape. Lives only for the duration of one run."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    description: str = ""
    content: str = ""
    links: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ContactBundle(BaseModel):
    """Contact data pulled out of the page. Set semantics throughout."""
    model_config = ConfigDict(frozen=True)

    emails: frozenset[str] = frozenset()
    phones: frozenset[str] = frozenset()
    social_links: frozenset[str] = frozenset()

    @field_serializer("emails", "phones", "social_links")
    def _sorted(self, value: frozenset[str]) -> list[str]:
        return sorted(value)


class CompanyProfile(BaseModel):
    """
    Structured company attributes.

    The generative backend answers with camelCase keys, so every field
    carries an alias. Every field is required: a response missing one is
    rejected and replaced by `fallback()`.
    """
    model_config = ConfigDict(populate_by_name=True)

    company_name: str = Field(alias="companyName")
    industry: str
    company_size: str = Field(alias="companySize")
    location: str
    summary: str
    services: list[str]
    pain_points: list[str] = Field(alias="painPoints")
    target_audience: str = Field(alias="targetAudience")
    value_proposition: str = Field(alias="valueProposition")
    tech_stack: list[str] = Field(alias="techStack")
    key_features: list[str] = Field(alias="keyFeatures")

    @classmethod
    def fallback(cls, title: str = "") -> "CompanyProfile":
        """Profile used when analysis fails. Summary stays empty, not "Unknown"."""
        return cls(
            company_name=title.strip() or UNKNOWN,
            industry=UNKNOWN,
            company_size=UNKNOWN,
            location=UNKNOWN,
            summary="",
            services=[],
            pain_points=[],
            target_audience=UNKNOWN,
            value_proposition=UNKNOWN,
            tech_stack=[],
            key_features=[],
        )


class OutreachEmail(BaseModel):
    """A drafted outreach email."""
    subject: str
    body: str


class ScrapeSnapshot(BaseModel):
    """The part of the scrape kept on the record. Full page text is dropped."""
    title: str = ""
    description: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class LeadRecord(BaseModel):
    """The persisted lead. Frozen once created."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    owner_id: str
    url: str
    company_name: str
    industry: str
    company_size: str
    location: str
    summary: str
    services: list[str] = Field(default_factory=list)
    pain_points: list[str] = Field(default_factory=list)
    target_audience: str
    value_proposition: str
    tech_stack: list[str] = Field(default_factory=list)
    key_features: list[str] = Field(default_factory=list)
    lead_score: float = Field(ge=0, le=10)
    contacts: ContactBundle = Field(default_factory=ContactBundle)
    generated_email: OutreachEmail
    scraped_content: ScrapeSnapshot = Field(default_factory=ScrapeSnapshot)
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LeadFilter(BaseModel):
    """Filters accepted by the lead store listing."""
    search: Optional[str] = None
    industry: Optional[str] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None


class LeadStats(BaseModel):
    """Per-owner aggregates shown on the dashboard."""
    total_leads: int = 0
    avg_score: float = 0.0
    high_score_leads: int = 0


@dataclass
class StageResult(Generic[T]):
    """Outcome of a degradable stage. `error` is set when `value` is a fallback."""
    value: T
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.error is not None
