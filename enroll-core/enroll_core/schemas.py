"""
API Schemas
===========
Pydantic models for request and response bodies. JSON field names are
camelCase; Python attributes are snake_case.
"""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from enroll_core.messaging.phone_utils import normalize_mobile

DEFAULT_STATUS = "Not Enrolled"

_AADHAR_PATTERN = re.compile(r'^[0-9]{12}$')


def normalize_aadhar(value: str) -> str:
    digits = re.sub(r'[\s\-]', '', value)
    if not _AADHAR_PATTERN.match(digits):
        raise ValueError("Aadhar number must be 12 digits")
    return digits


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidateBase(CamelModel):
    name: str = Field(min_length=1)
    dob: str = Field(min_length=1)
    mobile: str
    aadhar: str
    address: Optional[str] = None
    program: Optional[str] = None
    center: Optional[str] = None
    trainer: Optional[str] = None
    duration: Optional[str] = None
    trained: bool = False
    status: str = DEFAULT_STATUS
    profile_image: Optional[str] = None


class CandidateCreate(CandidateBase):
    """Body of ``POST /api/candidates``."""

    @field_validator("mobile")
    @classmethod
    def _mobile(cls, v: str) -> str:
        return normalize_mobile(v)

    @field_validator("aadhar")
    @classmethod
    def _aadhar(cls, v: str) -> str:
        return normalize_aadhar(v)


class CandidateUpdate(CamelModel):
    """Body of ``PUT /api/candidates/{id}``; only sent fields change."""
    name: Optional[str] = Field(default=None, min_length=1)
    dob: Optional[str] = Field(default=None, min_length=1)
    mobile: Optional[str] = None
    aadhar: Optional[str] = None
    address: Optional[str] = None
    program: Optional[str] = None
    center: Optional[str] = None
    trainer: Optional[str] = None
    duration: Optional[str] = None
    trained: Optional[bool] = None
    status: Optional[str] = None
    profile_image: Optional[str] = None

    @field_validator("name", "dob", "mobile", "aadhar", "trained", "status", mode="before")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("field may not be null")
        return v

    @field_validator("mobile")
    @classmethod
    def _mobile(cls, v: str) -> str:
        return normalize_mobile(v)

    @field_validator("aadhar")
    @classmethod
    def _aadhar(cls, v: str) -> str:
        return normalize_aadhar(v)


class Candidate(CandidateBase):
    """A stored candidate."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    candidate_id: str
    created_at: datetime


class CandidateSearch(CamelModel):
    aadhar: Optional[str] = None
    mobile: Optional[str] = None


class OTPIssueRequest(CamelModel):
    phone_number: str


class OTPVerifyRequest(CamelModel):
    phone_number: str
    code: str
