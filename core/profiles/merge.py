#!/usr/bin/env python3
"""
Merge rules for profile sections.

Each section key maps to a schema and a strategy:
- shallow: provided fields overwrite stored ones, others are kept
- replace: the whole value is swapped (social link arrays; null clears)
- deep: nested objects are merged one level down over defaults
  (account settings)

Results are always fresh dicts/lists so JSON columns register the change.
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type

from core.profiles.sections import (
    AccountSettings,
    CandidateProfileUpdate,
    CompanyInfo,
    EmployerProfileUpdate,
    FoundingInfo,
    PersonalInfo,
    ProfileDetails,
    SectionModel,
    SocialLink,
)


class MergeStrategy(str, Enum):
    SHALLOW = "shallow"
    REPLACE = "replace"
    DEEP = "deep"


@dataclass(frozen=True)
class SectionRule:
    schema: Type[SectionModel]
    strategy: MergeStrategy


CANDIDATE_SECTIONS: Dict[str, SectionRule] = {
    'personalInfo': SectionRule(PersonalInfo, MergeStrategy.SHALLOW),
    'profileDetails': SectionRule(ProfileDetails, MergeStrategy.SHALLOW),
    'socialLinks': SectionRule(SocialLink, MergeStrategy.REPLACE),
    'accountSettings': SectionRule(AccountSettings, MergeStrategy.DEEP),
}

EMPLOYER_SECTIONS: Dict[str, SectionRule] = {
    'companyInfo': SectionRule(CompanyInfo, MergeStrategy.SHALLOW),
    'foundingInfo': SectionRule(FoundingInfo, MergeStrategy.SHALLOW),
    'socialLinks': SectionRule(SocialLink, MergeStrategy.REPLACE),
}

DEFAULT_ACCOUNT_SETTINGS: Dict[str, Any] = {
    'contact': {},
    'notifications': {
        'shortlisted': True,
        'saved': True,
        'jobExpired': True,
        'rejected': True,
        'jobAlerts': True,
    },
    'jobAlerts': {},
    'privacy': {
        'profilePublic': True,
        'resumePublic': False,
    },
}


def default_account_settings() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_ACCOUNT_SETTINGS)


def merge_shallow(current: Optional[Mapping[str, Any]], patch: Mapping[str, Any]) -> Dict[str, Any]:
    return {**dict(current or {}), **patch}


def merge_deep(current: Optional[Mapping[str, Any]], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge nested objects one level down; scalars and lists are replaced."""
    merged = copy.deepcopy(dict(current or {}))
    for key, value in patch.items():
        existing = merged.get(key)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            merged[key] = {**existing, **value}
        elif isinstance(value, Mapping):
            merged[key] = dict(value)
        else:
            merged[key] = value
    return merged


def replace_links(links: Optional[List[SocialLink]]) -> List[Dict[str, Any]]:
    if not links:
        return []
    return [link.model_dump(mode='json', by_alias=True) for link in links]


def merge_section(rule: SectionRule, current: Any, value: Any) -> Any:
    """Apply one section's strategy to its stored value."""
    if rule.strategy == MergeStrategy.REPLACE:
        return replace_links(value)
    patch = value.to_patch()
    if rule.strategy == MergeStrategy.DEEP:
        return merge_deep(current, patch)
    return merge_shallow(current, patch)


def with_account_defaults(settings: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Stored settings layered over the defaults."""
    return merge_deep(default_account_settings(), settings or {})


def apply_candidate_update(
    document: Mapping[str, Any],
    update: CandidateProfileUpdate,
    uploads: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Produce the next candidate document from the stored one and a validated update.

    Args:
        document: Current section map (camelCase keys, as CandidateProfile.to_document())
        update: Validated partial update
        uploads: Already-stored file URLs keyed by personalInfo field
            (profileImage, cvUrl); they win over values in the update

    Returns:
        New section map; account settings always carry the defaults
    """
    result = {
        'personalInfo': dict(document.get('personalInfo') or {}),
        'profileDetails': dict(document.get('profileDetails') or {}),
        'socialLinks': list(document.get('socialLinks') or []),
        'accountSettings': with_account_defaults(document.get('accountSettings')),
    }

    for key, value in update.sent_sections().items():
        result[key] = merge_section(CANDIDATE_SECTIONS[key], result[key], value)

    if uploads:
        result['personalInfo'] = merge_shallow(
            result['personalInfo'], {k: v for k, v in uploads.items() if v}
        )
    return result


def apply_employer_update(
    document: Mapping[str, Any],
    update: EmployerProfileUpdate,
    uploads: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Produce the next employer document.

    Contact fields and the profile image only overwrite when a non-empty
    value is provided. Social links are replaced only by a non-empty list.
    Uploaded logo/banner URLs land in companyInfo.
    """
    result = {
        'profileImage': document.get('profileImage') or '',
        'phone': document.get('phone') or '',
        'email': document.get('email') or '',
        'location': document.get('location') or '',
        'socialLinks': list(document.get('socialLinks') or []),
        'companyInfo': dict(document.get('companyInfo') or {}),
        'foundingInfo': dict(document.get('foundingInfo') or {}),
    }

    for key, value in (('companyInfo', update.company_info), ('foundingInfo', update.founding_info)):
        if value is not None:
            result[key] = merge_section(EMPLOYER_SECTIONS[key], result[key], value)
    # An empty list keeps the stored links
    if update.social_links:
        result['socialLinks'] = merge_section(
            EMPLOYER_SECTIONS['socialLinks'], result['socialLinks'], update.social_links
        )

    contact = update.contact.to_patch() if update.contact is not None else {}
    for name in ('phone', 'email', 'location'):
        value = getattr(update, name) or contact.get(name)
        if value:
            result[name] = value
    if update.profile_image:
        result['profileImage'] = update.profile_image

    if uploads:
        result['companyInfo'] = merge_shallow(
            result['companyInfo'], {k: v for k, v in uploads.items() if v}
        )
    return result
