from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .resume_pack import AnalysisLists, EvidencePreview, ResumePack

BucketLabel = Literal["Structure", "Summary", "Skills", "Experience", "Education", "Keywords"]
KeywordSource = Literal["triggered", "noun_phrase", "extra", "synthetic"]
ScoreSource = Literal["model", "heuristic"]

BUCKET_ORDER: tuple[BucketLabel, ...] = ("Structure", "Summary", "Skills", "Experience", "Education", "Keywords")
BUCKET_MAX: dict[str, int] = {
    "Structure": 20,
    "Summary": 20,
    "Skills": 20,
    "Experience": 20,
    "Education": 10,
    "Keywords": 10,
}


class SectionFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_summary: bool = False
    has_education: bool = False
    has_skills: bool = False
    has_experience: bool = False
    has_tools: bool = False
    has_projects: bool = False
    has_contact: bool = False
    uses_bullets: bool = False


class KeywordToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    canonical: str
    source: KeywordSource


class KeywordMatchResult(BaseModel):
    matched: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    partial: list[str] = Field(default_factory=list)
    pct: int = Field(default=0, ge=0, le=100)
    present_in_jd: list[str] = Field(default_factory=list)


class ATSBucketScore(BaseModel):
    label: BucketLabel
    score: int
    max: int
    reasons: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_bounds(self) -> "ATSBucketScore":
        if self.max < 1:
            raise ValueError("max must be at least 1")
        if self.score < 0 or self.score > self.max:
            raise ValueError(f"score must be between 0 and {self.max}")
        return self

    def feedback_line(self) -> str:
        head = f"{self.label}: {self.score}/{self.max}"
        if not self.reasons:
            return head
        return f"{head} — {'; '.join(self.reasons)}"


class HeuristicParts(BaseModel):
    structure25: int = Field(ge=0, le=25)
    summary20: int = Field(ge=0, le=20)
    skills20: int = Field(ge=0, le=20)
    experience20: int = Field(ge=0, le=20)
    education10: int = Field(ge=0, le=10)
    keywords7: int = Field(ge=0, le=7)


class HeuristicResult(BaseModel):
    score: int = Field(ge=0, le=100)
    buckets: list[ATSBucketScore]
    feedback: list[str]
    parts: HeuristicParts


class ReconciledScore(BaseModel):
    score: int = Field(ge=0, le=100)
    breakdown: list[ATSBucketScore]
    feedback: list[str]
    source: ScoreSource


class JobFitBuckets(BaseModel):
    must_have: int = Field(default=50, ge=0, le=100)
    core_skills: int = Field(default=50, ge=0, le=100)
    domain_title_adjacency: int = Field(default=50, ge=0, le=100)
    seniority: int = Field(default=50, ge=0, le=100)
    recency: int = Field(default=50, ge=0, le=100)
    nice_to_haves: int = Field(default=50, ge=0, le=100)


class JobFitScore(BaseModel):
    score: int = Field(ge=0, le=100)
    buckets: JobFitBuckets


class KeywordDisplay(BaseModel):
    pct: int = Field(ge=0, le=100)
    matched: list[str] = Field(default_factory=list)
    partial: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    present_in_jd: list[str] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    resume_text: str = Field(min_length=1, max_length=60000)
    job_description_text: str = Field(min_length=1, max_length=30000)
    job_title: str = Field(default="", max_length=200)
    company_name: str = Field(default="", max_length=200)
    use_model: bool = True
    require_model: bool = False


class AnalysisResponse(BaseModel):
    success: bool = True
    mode: ScoreSource
    ats_score: ReconciledScore
    job_fit: JobFitScore
    overall_score: int = Field(ge=0, le=100)
    keywords: KeywordDisplay
    sections: SectionFlags
    analysis_lists: AnalysisLists
    pack: ResumePack | None = None
    evidence: EvidencePreview = Field(default_factory=EvidencePreview)
    narrative: str = ""
    message: str = ""
