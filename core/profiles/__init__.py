from core.profiles.sections import (
    CandidateProfileUpdate,
    EmployerProfileUpdate,
    SocialPlatform,
    parse_section,
)
from core.profiles.merge import (
    CANDIDATE_SECTIONS,
    EMPLOYER_SECTIONS,
    apply_candidate_update,
    apply_employer_update,
    default_account_settings,
    with_account_defaults,
)

__all__ = [
    'CandidateProfileUpdate',
    'EmployerProfileUpdate',
    'SocialPlatform',
    'parse_section',
    'CANDIDATE_SECTIONS',
    'EMPLOYER_SECTIONS',
    'apply_candidate_update',
    'apply_employer_update',
    'default_account_settings',
    'with_account_defaults',
]
