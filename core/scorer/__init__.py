#!/usr/bin/env python3
"""
Profile Completeness Scoring.

Public API:
- score_candidate_profile: weighted section scoring for candidate profiles
- score_employer_profile: unit-based scoring for employer profiles
- CompletionScore: (percentage, is_complete) result

Both scorers are pure functions of the profile document; callers persist
the result in the same write that changed the source fields.
"""

from core.scorer.models import CompletionScore, COMPLETE_THRESHOLD
from core.scorer.candidate import score_candidate_profile
from core.scorer.employer import score_employer_profile

__all__ = [
    'CompletionScore',
    'COMPLETE_THRESHOLD',
    'score_candidate_profile',
    'score_employer_profile',
]
