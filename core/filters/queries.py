#!/usr/bin/env python3
"""
Collection-specific filters and sort allowlists for jobs, candidates, employers
and saved jobs.

Each *_filters function returns a FilterBuilder; repositories apply the same
conditions to the page query and to the separate count query.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import exists, or_, select

from core.filters.builder import FilterBuilder, SortColumn, contains, element_contains, is_unset
from core.lifecycle.states import JobStatus
from database.models import Job, CandidateProfile, EmployerProfile, SavedJob


# === Jobs ===

@dataclass
class JobListParams:
    """Basic listing filters (GET /api/jobs)."""
    search: Optional[str] = None
    job_type: Optional[str] = None
    location: Optional[str] = None
    experience_level: Optional[str] = None
    job_category: Optional[str] = None
    is_remote: Optional[bool] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None


@dataclass
class JobSearchParams(JobListParams):
    """Advanced search filters (GET /api/jobs/search)."""
    keyword: Optional[str] = None
    job_title: Optional[str] = None
    position: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    tags: List[str] = field(default_factory=list)


JOB_SORTS: Dict[str, Sequence[SortColumn]] = {
    'postedDate': [Job.posted_date],
    'expirationDate': [Job.expiration_date],
    'salary': [Job.salary_max],
    'jobTitle': [Job.job_title],
    'views': [Job.views],
    'applicationsCount': [Job.applications_count],
    'relevance': [(Job.is_featured, 'desc'), (Job.posted_date, 'desc')],
}
JOB_DEFAULT_SORT = 'postedDate'


def _company_name_matches(term: str):
    company_name = EmployerProfile.company_info['companyName'].as_string()
    return exists(
        select(EmployerProfile.id).where(
            EmployerProfile.user_id == Job.employer_id,
            contains(company_name, term),
        )
    )


def open_jobs(now: datetime) -> FilterBuilder:
    """Active postings whose expiration date is still ahead."""
    return FilterBuilder([
        Job.status == JobStatus.ACTIVE.value,
        Job.expiration_date > now,
    ])


def job_list_filters(params: JobListParams, now: datetime) -> FilterBuilder:
    builder = open_jobs(now)
    if not is_unset(params.search):
        builder.where(or_(
            contains(Job.job_title, params.search),
            contains(Job.job_description, params.search),
            element_contains(Job.tags, params.search),
        ))
    builder.equals(Job.job_type, params.job_type)
    builder.text(Job.city, params.location)
    builder.equals(Job.experience_level, params.experience_level)
    builder.equals(Job.job_category, params.job_category)
    builder.flag(Job.is_remote, params.is_remote)
    builder.range_overlap(Job.salary_min, Job.salary_max, params.min_salary, params.max_salary)
    return builder


def job_search_filters(params: JobSearchParams, now: datetime) -> FilterBuilder:
    builder = open_jobs(now)

    if not is_unset(params.search):
        builder.where(or_(
            contains(Job.job_title, params.search),
            contains(Job.job_description, params.search),
            element_contains(Job.tags, params.search),
            _company_name_matches(params.search),
        ))
    builder.text_group([Job.job_title, Job.job_description], params.keyword)
    builder.text(Job.job_title, params.job_title)
    builder.text(Job.job_title, params.position)

    # Each location field is its own group
    builder.text(Job.city, params.city)
    builder.text(Job.state, params.state)
    builder.text(Job.zip_code, params.zip_code)
    builder.text_group([Job.city, Job.state, Job.country, Job.zip_code], params.location)
    builder.equals(Job.country, params.country)

    builder.flag(Job.is_remote, params.is_remote)
    builder.equals(Job.job_type, params.job_type)
    builder.equals(Job.experience_level, params.experience_level)
    builder.equals(Job.job_category, params.job_category)
    builder.range_overlap(Job.salary_min, Job.salary_max, params.min_salary, params.max_salary)
    builder.any_term(Job.tags, params.tags, match=element_contains)
    return builder


# === Candidates ===

@dataclass
class CandidateSearchParams:
    search: Optional[str] = None
    location: Optional[str] = None
    gender: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    min_completion: Optional[int] = None


CANDIDATE_SORTS: Dict[str, Sequence[SortColumn]] = {
    'completionPercentage': [CandidateProfile.completion_percentage],
    'lastUpdated': [CandidateProfile.last_updated],
    'createdAt': [CandidateProfile.created_at],
    'fullName': [CandidateProfile.personal_info['fullName'].as_string()],
}
CANDIDATE_DEFAULT_SORT = 'completionPercentage'


def public_candidates() -> FilterBuilder:
    profile_public = CandidateProfile.account_settings[('privacy', 'profilePublic')].as_boolean()
    return FilterBuilder([profile_public.is_(True)])


def candidate_filters(params: CandidateSearchParams) -> FilterBuilder:
    personal = CandidateProfile.personal_info
    details = CandidateProfile.profile_details

    builder = public_candidates()
    builder.text_group(
        [
            personal['fullName'].as_string(),
            personal['title'].as_string(),
            details['biography'].as_string(),
        ],
        params.search,
    )
    builder.text(
        CandidateProfile.account_settings[('contact', 'location')].as_string(),
        params.location,
    )
    builder.equals(details['gender'].as_string(), params.gender)
    builder.equals(personal['experience'].as_string(), params.experience)
    builder.equals(personal['education'].as_string(), params.education)
    builder.at_least(CandidateProfile.completion_percentage, params.min_completion)
    return builder


# === Employers ===

@dataclass
class EmployerSearchParams:
    search: Optional[str] = None
    location: Optional[str] = None
    industry_type: Optional[str] = None
    featured: Optional[bool] = None


EMPLOYER_SORTS: Dict[str, Sequence[SortColumn]] = {
    'companyName': [EmployerProfile.company_info['companyName'].as_string()],
    'createdAt': [EmployerProfile.created_at],
    'completionPercentage': [EmployerProfile.completion_percentage],
}
EMPLOYER_DEFAULT_SORT = 'companyName'


def employer_filters(params: EmployerSearchParams) -> FilterBuilder:
    builder = FilterBuilder()
    builder.text(EmployerProfile.company_info['companyName'].as_string(), params.search)
    builder.text(EmployerProfile.location, params.location)
    builder.equals(EmployerProfile.founding_info['industryType'].as_string(), params.industry_type)
    builder.flag(EmployerProfile.is_featured, params.featured)
    return builder


# === Saved jobs ===

SAVED_JOB_SORTS: Dict[str, Sequence[SortColumn]] = {
    'savedDate': [SavedJob.saved_date],
    'createdAt': [SavedJob.created_at],
}
SAVED_JOB_DEFAULT_SORT = 'savedDate'
