"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from interview_session import CompanyProfile


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompanyReq(ApiModel):
    name: str = "Tech Company"
    organization_type: str = "startup"
    role: str = "Software Development Engineer"
    level: str = "Entry level"
    industry: str = "technology"

    def to_profile(self) -> CompanyProfile:
        return CompanyProfile(**self.model_dump())


class CreateSessionReq(ApiModel):
    interview_kind: str
    company: CompanyReq = Field(default_factory=CompanyReq)
    resume_text: str = ""


class SubmitCodeReq(ApiModel):
    code: str = Field(min_length=1)
    language: str = "javascript"
