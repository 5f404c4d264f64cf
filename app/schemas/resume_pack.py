from __future__ import annotations

from pydantic import BaseModel, Field


class ExperienceEntry(BaseModel):
    employer: str = ""
    title: str = ""
    location: str = ""
    start: str = ""
    end: str = ""
    bullets: list[str] = Field(default_factory=list)


class ProjectEntry(BaseModel):
    name: str = ""
    context: str = ""
    tools: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)


class EducationEntry(BaseModel):
    name: str
    institution: str = ""
    year: str = ""


class ResumePack(BaseModel):
    professional_summary: str = ""
    key_skills: list[str] = Field(default_factory=list, max_length=25)
    inferred_skills: list[str] = Field(default_factory=list)
    professional_experience: list[ExperienceEntry] = Field(default_factory=list)
    key_projects: list[ProjectEntry] = Field(default_factory=list)
    education_and_certification: list[EducationEntry] = Field(default_factory=list)
    tools_and_technologies: list[str] = Field(default_factory=list)


class AnalysisLists(BaseModel):
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    overall_summary: str = ""


class MatchedEvidence(BaseModel):
    item: str
    resume_quotes: list[str] = Field(default_factory=list, max_length=3)
    jd_quotes: list[str] = Field(default_factory=list, max_length=3)


class MissingEvidence(BaseModel):
    item: str
    jd_quotes: list[str] = Field(default_factory=list, max_length=3)


class EvidencePreview(BaseModel):
    matched: list[MatchedEvidence] = Field(default_factory=list, max_length=5)
    missing: list[MissingEvidence] = Field(default_factory=list, max_length=5)
