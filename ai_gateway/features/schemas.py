"""
Request and response schemas for AI features.

Request models validate inbound payloads; response models validate
upstream output before it may be cached and shape fallback output so
both are indistinguishable to consumers apart from provenance markers.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_JOB_DESCRIPTION_LENGTH = 6000
MAX_RESUME_LENGTH = 9000
MAX_MATCH_RESUME_LENGTH = 16000
MIN_MATCH_RESUME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 4000


def _truncate(value: Any, limit: int) -> Any:
    if isinstance(value, str):
        return value.strip()[:limit]
    return value


class FeatureRequest(BaseModel):
    """Base class for inbound feature payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def canonical_payload(self) -> dict:
        """Payload used for cache key derivation."""
        return self.model_dump(mode="json")


class FeatureResult(BaseModel):
    """Base class for feature response bodies."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    fallback: bool = Field(default=False, description="Produced by offline fallback")
    quota_exceeded: bool = Field(
        default=False, description="Upstream quota was exhausted"
    )
    note: Optional[str] = Field(default=None, description="Explanatory note")

    def has_content(self) -> bool:
        """Whether the body carries anything worth returning or caching."""
        return True

    def as_generated(self) -> "FeatureResult":
        """
        Copy with the degraded-response markers cleared.

        Upstream output may echo these fields; only the fallback
        generator is allowed to set them.
        """
        return self.model_copy(
            update={"fallback": False, "quota_exceeded": False, "note": None}
        )

    def to_body(self) -> dict:
        """Serialize for callers (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


def _round_score(value: Any) -> Any:
    if isinstance(value, float):
        return int(round(value))
    return value


# ATS score


class ATSScoreRequest(FeatureRequest):
    """Resume vs job description ATS analysis request."""

    job_description: str = Field(..., min_length=1)
    resume_text: str = Field(..., min_length=1)

    @field_validator("job_description", mode="before")
    @classmethod
    def truncate_job_description(cls, v: Any) -> Any:
        """Cap job description length."""
        return _truncate(v, MAX_JOB_DESCRIPTION_LENGTH)

    @field_validator("resume_text", mode="before")
    @classmethod
    def truncate_resume(cls, v: Any) -> Any:
        """Cap resume length."""
        return _truncate(v, MAX_RESUME_LENGTH)


class CategoryScores(BaseModel):
    """Per-category ATS sub-scores."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    contact_info: int = Field(..., ge=0, le=100)
    work_experience: int = Field(..., ge=0, le=100)
    education: int = Field(..., ge=0, le=100)
    skills: int = Field(..., ge=0, le=100)
    formatting: int = Field(..., ge=0, le=100)
    keywords: int = Field(..., ge=0, le=100)

    @field_validator("*", mode="before")
    @classmethod
    def round_scores(cls, v: Any) -> Any:
        """Accept fractional sub-scores."""
        return _round_score(v)


class KeywordAnalysis(BaseModel):
    """Keyword coverage details."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_keywords: int = Field(..., ge=0)
    matched_keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)
    match_percentage: int = Field(..., ge=0, le=100)

    @field_validator("match_percentage", mode="before")
    @classmethod
    def round_percentage(cls, v: Any) -> Any:
        """Accept fractional percentages."""
        return _round_score(v)


class ATSScoreResult(FeatureResult):
    """ATS analysis result."""

    score: int = Field(..., ge=0, le=100)
    missing_keywords: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    category_scores: Optional[CategoryScores] = None
    keyword_analysis: Optional[KeywordAnalysis] = None

    @field_validator("score", mode="before")
    @classmethod
    def round_score(cls, v: Any) -> Any:
        """Accept fractional scores; range is still enforced."""
        return _round_score(v)

    @field_validator("recommendations", mode="before")
    @classmethod
    def flatten_recommendations(cls, v: Any) -> Any:
        """Accept structured recommendations by keeping their action text."""
        if not isinstance(v, list):
            return v
        flattened = []
        for item in v:
            if isinstance(item, dict):
                item = item.get("action") or item.get("issue") or ""
            flattened.append(str(item))
        return [item for item in flattened if item]


# Job match


class JobMatchRequest(FeatureRequest):
    """Suggest matching roles for a resume."""

    resume_text: str = Field(..., min_length=MIN_MATCH_RESUME_LENGTH)
    location: str = Field(default="", max_length=200)
    preferences: str = Field(default="", max_length=500)

    @field_validator("resume_text", mode="before")
    @classmethod
    def truncate_resume(cls, v: Any) -> Any:
        """Cap resume length."""
        return _truncate(v, MAX_MATCH_RESUME_LENGTH)


class JobMatch(BaseModel):
    """A single suggested role."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=80)
    company: Optional[str] = Field(default=None, max_length=100)
    fit_score: int = Field(default=0, ge=0, le=100)
    summary: str = Field(default="", max_length=240)
    keywords: List[str] = Field(default_factory=list, max_length=10)
    query: Optional[str] = Field(default=None, max_length=200)

    @field_validator("title", "summary", mode="before")
    @classmethod
    def coerce_text(cls, v: Any, info) -> Any:
        """Coerce to text and cap length."""
        limit = 80 if info.field_name == "title" else 240
        return str(v or "").strip()[:limit]

    @field_validator("company", mode="before")
    @classmethod
    def coerce_company(cls, v: Any) -> Any:
        """Coerce company to text and cap length."""
        return str(v).strip()[:100] if v else None

    @field_validator("query", mode="before")
    @classmethod
    def coerce_query(cls, v: Any) -> Any:
        """Coerce query to text and cap length."""
        return str(v).strip()[:200] if v else None

    @field_validator("fit_score", mode="before")
    @classmethod
    def clamp_fit_score(cls, v: Any) -> int:
        """Clamp into 0-100; unparseable values become 0."""
        try:
            number = float(v)
        except (TypeError, ValueError):
            return 0
        return max(0, min(100, int(round(number))))

    @field_validator("keywords", mode="before")
    @classmethod
    def cap_keywords(cls, v: Any) -> Any:
        """Keep the first ten keywords as text."""
        if not isinstance(v, list):
            return []
        return [str(k) for k in v[:10]]


class JobMatchResult(FeatureResult):
    """Suggested roles with fit scores."""

    matches: List[JobMatch] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("matches", mode="before")
    @classmethod
    def cap_matches(cls, v: Any) -> Any:
        """Keep at most eight matches."""
        if isinstance(v, list):
            return v[:8]
        return v

    @property
    def count(self) -> int:
        """Number of matches."""
        return len(self.matches)

    def has_content(self) -> bool:
        return bool(self.matches)


# Summary


class SummaryRequest(FeatureRequest):
    """Generate a professional summary."""

    resume_text: str = Field(..., min_length=1)
    target_role: str = Field(default="", max_length=120)

    @field_validator("resume_text", mode="before")
    @classmethod
    def truncate_resume(cls, v: Any) -> Any:
        """Cap resume length."""
        return _truncate(v, MAX_RESUME_LENGTH)


class SummaryResult(FeatureResult):
    """Professional summary text."""

    summary: str = Field(default="")

    def has_content(self) -> bool:
        return bool(self.summary.strip())


# Bullets


class BulletsRequest(FeatureRequest):
    """Generate achievement bullets for one role."""

    role: str = Field(..., min_length=1, max_length=120)
    company: str = Field(default="", max_length=120)
    description: str = Field(..., min_length=1)
    job_description: str = Field(default="")
    count: int = Field(default=4, ge=1, le=8)

    @field_validator("description", mode="before")
    @classmethod
    def truncate_description(cls, v: Any) -> Any:
        """Cap description length."""
        return _truncate(v, MAX_DESCRIPTION_LENGTH)

    @field_validator("job_description", mode="before")
    @classmethod
    def truncate_job_description(cls, v: Any) -> Any:
        """Cap job description length."""
        return _truncate(v, MAX_JOB_DESCRIPTION_LENGTH)


class BulletsResult(FeatureResult):
    """Achievement bullets."""

    bullets: List[str] = Field(default_factory=list)

    @field_validator("bullets", mode="before")
    @classmethod
    def clean_bullets(cls, v: Any) -> Any:
        """Drop blank bullets and list markers."""
        if not isinstance(v, list):
            return v
        cleaned = [str(b).strip().lstrip("-*• ").strip() for b in v]
        return [b for b in cleaned if b][:8]

    def has_content(self) -> bool:
        return bool(self.bullets)


# Keywords


class KeywordsRequest(FeatureRequest):
    """Extract ATS keywords from a job description."""

    job_description: str = Field(..., min_length=1)
    resume_text: str = Field(default="")

    @field_validator("job_description", mode="before")
    @classmethod
    def truncate_job_description(cls, v: Any) -> Any:
        """Cap job description length."""
        return _truncate(v, MAX_JOB_DESCRIPTION_LENGTH)

    @field_validator("resume_text", mode="before")
    @classmethod
    def truncate_resume(cls, v: Any) -> Any:
        """Cap resume length."""
        return _truncate(v, MAX_RESUME_LENGTH)


class KeywordsResult(FeatureResult):
    """Job description keywords split by resume coverage."""

    keywords: List[str] = Field(default_factory=list)
    matched_keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)

    def has_content(self) -> bool:
        return bool(self.keywords)
