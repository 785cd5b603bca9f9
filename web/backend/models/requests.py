#!/usr/bin/env python3
"""
Request models for API endpoints.

Field names are accepted in camelCase (as clients send them) or snake_case.
"""

from datetime import datetime
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.lifecycle.states import ApplicationStatus, JobStatus
from core.lifecycle.state_machine import InterviewDetails


class CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Jobs ===

class JobFields(CamelRequest):
    """Writable job fields. Counters, owner and slug are never accepted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    job_title: Optional[str] = None
    job_description: Optional[str] = None
    job_type: Optional[str] = None
    min_salary: Optional[int] = Field(default=None, ge=0)
    max_salary: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = None
    is_negotiable: Optional[bool] = None
    country: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    address: Optional[str] = None
    is_remote: Optional[bool] = None
    experience_level: Optional[str] = None
    education_level: Optional[str] = None
    vacancies: Optional[int] = Field(default=None, ge=1)
    job_category: Optional[str] = None
    tags: Optional[Union[str, List[str]]] = None
    benefits: Optional[Union[str, List[str]]] = None
    application_method: Optional[Literal['Platform', 'Email', 'External']] = None
    application_email: Optional[str] = None
    application_url: Optional[str] = None
    expiration_date: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class JobCreate(JobFields):
    status: Optional[Literal['Active', 'Draft']] = None


class JobUpdate(JobFields):
    status: Optional[JobStatus] = None


class JobPromote(CamelRequest):
    action: str = Field(..., description="feature or highlight")
    value: bool = True


# === Applications ===

class StatusUpdate(CamelRequest):
    status: ApplicationStatus
    note: Optional[str] = None
    interview_details: Optional[InterviewDetails] = None


class NoteCreate(CamelRequest):
    text: str = Field(..., min_length=1)


class WithdrawRequest(CamelRequest):
    reason: Optional[str] = None


# === Saved items ===

class SavedJobCreate(CamelRequest):
    job_id: str


class SavedJobNote(CamelRequest):
    notes: str = Field(default='', max_length=500)


class SavedCandidateCreate(CamelRequest):
    candidate_id: str


# === Search history ===

class SearchLog(CamelRequest):
    search_query: str
    search_type: Literal['job', 'location', 'keyword', 'combined'] = 'keyword'
    filters: dict = Field(default_factory=dict)


# === Statuses ===

class StatusCreate(CamelRequest):
    name: str = Field(..., min_length=1)
    color: Optional[str] = None
    order: Optional[int] = None


class StatusEdit(CamelRequest):
    name: Optional[str] = None
    color: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class StatusOrder(CamelRequest):
    id: str
    order: int


class StatusReorder(CamelRequest):
    statuses: List[StatusOrder]

    def pairs(self) -> List[Tuple[str, int]]:
        return [(s.id, s.order) for s in self.statuses]
