#!/usr/bin/env python3
"""
Candidate profile completeness.

Sections and their maximum contribution:
- personal info, required fields: 4 x 10 = 40
- personal info, optional fields: 2 x 5 = 10
- profile details: 5 x 6 = 30
- social links: 10 when at least one valid link exists
- contact settings: 3 x 3.33, capped at 10

A missing section scores zero for that section, never an error.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from core.scorer.models import CompletionScore
from core.utils import is_filled

logger = logging.getLogger(__name__)

REQUIRED_PERSONAL_FIELDS = ('fullName', 'title', 'experience', 'education')
OPTIONAL_PERSONAL_FIELDS = ('profileImage', 'cvUrl')
DETAIL_FIELDS = ('nationality', 'dateOfBirth', 'gender', 'maritalStatus', 'biography')
DATE_FIELDS = frozenset({'dateOfBirth'})
CONTACT_FIELDS = ('location', 'phone', 'email')

REQUIRED_PERSONAL_POINTS = 10
OPTIONAL_PERSONAL_POINTS = 5
DETAIL_POINTS = 6
SOCIAL_LINKS_POINTS = 10
CONTACT_POINTS = 3.33
CONTACT_CAP = 10


def _section(profile: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = profile.get(key)
    return value if isinstance(value, Mapping) else {}


def is_valid_social_link(link: Any) -> bool:
    """A link is valid when both platform and url are non-blank strings."""
    if not isinstance(link, Mapping):
        return False
    return is_filled(link.get('platform')) and is_filled(link.get('url'))


def score_personal_info(personal_info: Mapping[str, Any]) -> float:
    points = 0.0
    for name in REQUIRED_PERSONAL_FIELDS:
        if is_filled(personal_info.get(name)):
            points += REQUIRED_PERSONAL_POINTS
    for name in OPTIONAL_PERSONAL_FIELDS:
        if is_filled(personal_info.get(name)):
            points += OPTIONAL_PERSONAL_POINTS
    return points


def score_profile_details(details: Mapping[str, Any]) -> float:
    points = 0.0
    for name in DETAIL_FIELDS:
        value = details.get(name)
        # Dates count on truthiness alone
        filled = bool(value) if name in DATE_FIELDS else is_filled(value)
        if filled:
            points += DETAIL_POINTS
    return points


def score_social_links(links: Optional[Iterable[Any]]) -> float:
    if not links or isinstance(links, (str, Mapping)):
        return 0.0
    return SOCIAL_LINKS_POINTS if any(is_valid_social_link(link) for link in links) else 0.0


def score_contact(contact: Mapping[str, Any]) -> float:
    points = sum(CONTACT_POINTS for name in CONTACT_FIELDS if is_filled(contact.get(name)))
    return min(points, CONTACT_CAP)


def score_candidate_profile(profile: Optional[Mapping[str, Any]]) -> CompletionScore:
    """
    Compute completion for a candidate profile document.

    Args:
        profile: Section map with camelCase keys (personalInfo, profileDetails,
            socialLinks, accountSettings). Missing or malformed sections
            are treated as empty.

    Returns:
        CompletionScore with the rounded percentage and complete flag
    """
    profile = profile or {}
    breakdown: Dict[str, float] = {
        'personalInfo': score_personal_info(_section(profile, 'personalInfo')),
        'profileDetails': score_profile_details(_section(profile, 'profileDetails')),
        'socialLinks': score_social_links(profile.get('socialLinks')),
        'contact': score_contact(_section(_section(profile, 'accountSettings'), 'contact')),
    }
    score = CompletionScore.from_points(sum(breakdown.values()))
    logger.debug(f"Candidate completion {score.percentage}% breakdown={breakdown}")
    return score
