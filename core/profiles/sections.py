#!/usr/bin/env python3
"""
Profile section schemas.

Every section a client may write is a closed pydantic model: unknown
fields are rejected and enum-like strings are validated here, before the
merge rules in core.profiles.merge run. Field names are snake_case in
Python and camelCase on the wire and in stored documents.
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from core.exceptions import ValidationError
from core.scorer.candidate import is_valid_social_link


class SectionModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
        str_strip_whitespace=True,
    )

    def to_patch(self) -> dict:
        """Only the fields the client actually sent, camelCase keys."""
        return self.model_dump(mode='json', by_alias=True, exclude_unset=True)


class SocialPlatform(str, Enum):
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    YOUTUBE = "youtube"
    GITHUB = "github"
    BEHANCE = "behance"
    DRIBBBLE = "dribbble"
    PINTEREST = "pinterest"
    TIKTOK = "tiktok"
    SNAPCHAT = "snapchat"
    WHATSAPP = "whatsapp"
    TELEGRAM = "telegram"
    DISCORD = "discord"
    MEDIUM = "medium"
    REDDIT = "reddit"
    QUORA = "quora"
    STACKOVERFLOW = "stackoverflow"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    VIMEO = "vimeo"
    TWITCH = "twitch"
    SKYPE = "skype"
    SLACK = "slack"
    ZOOM = "zoom"
    FLICKR = "flickr"
    TUMBLR = "tumblr"
    VK = "vk"
    WECHAT = "wechat"
    WEIBO = "weibo"
    LINE = "line"
    KAKAO = "kakao"
    WHATSAPP_BUSINESS = "whatsapp_business"
    MESSENGER = "messenger"
    SIGNAL = "signal"
    WEBSITE = "website"
    OTHER = "other"


class SocialLink(SectionModel):
    platform: SocialPlatform
    url: str = Field(min_length=1)

    @field_validator('platform', mode='before')
    @classmethod
    def lowercase_platform(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() in ('', 'null'):
        return None
    return value


# === Candidate sections ===

ExperienceLevel = Literal['', 'Fresher', '0-1 years', '1-3 years', '3-5 years', '5-10 years', '10+ years']
EducationLevel = Literal['', 'High School', 'Diploma', "Bachelor's Degree", "Master's Degree", 'PhD', 'Other']
Gender = Literal['', 'Male', 'Female', 'Other', 'Prefer not to say']
MaritalStatus = Literal['', 'Single', 'Married', 'Divorced', 'Widowed']


class PersonalInfo(SectionModel):
    full_name: Optional[str] = None
    title: Optional[str] = None
    experience: Optional[ExperienceLevel] = None
    education: Optional[EducationLevel] = None
    website: Optional[str] = None
    cv_url: Optional[str] = None
    profile_image: Optional[str] = None


class ProfileDetails(SectionModel):
    nationality: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    marital_status: Optional[MaritalStatus] = None
    biography: Optional[str] = Field(default=None, max_length=2000)

    @field_validator('date_of_birth', mode='before')
    @classmethod
    def empty_date(cls, value: Any) -> Any:
        # Form clients send "" for a cleared date input; also accept full timestamps
        value = _blank_to_none(value)
        if isinstance(value, str) and 'T' in value:
            return value.split('T', 1)[0]
        return value


class ContactSettings(SectionModel):
    location: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class NotificationSettings(SectionModel):
    shortlisted: Optional[bool] = None
    saved: Optional[bool] = None
    job_expired: Optional[bool] = None
    rejected: Optional[bool] = None
    job_alerts: Optional[bool] = None


class JobAlertSettings(SectionModel):
    role: Optional[str] = None
    location: Optional[str] = None


class PrivacySettings(SectionModel):
    profile_public: Optional[bool] = None
    resume_public: Optional[bool] = None


class AccountSettings(SectionModel):
    contact: Optional[ContactSettings] = None
    notifications: Optional[NotificationSettings] = None
    job_alerts: Optional[JobAlertSettings] = None
    privacy: Optional[PrivacySettings] = None


class CandidateProfileUpdate(SectionModel):
    """
    Partial candidate profile write.

    A section left out is untouched. socialLinks distinguishes "absent"
    (keep), null (clear) and a list (replace with its valid entries).
    """
    personal_info: Optional[PersonalInfo] = None
    profile_details: Optional[ProfileDetails] = None
    social_links: Optional[List[SocialLink]] = None
    account_settings: Optional[AccountSettings] = None

    @field_validator('social_links', mode='before')
    @classmethod
    def drop_incomplete_links(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [link for link in value if is_valid_social_link(link)]
        return value

    def sent_sections(self) -> Dict[str, Any]:
        """Sections present in the payload, keyed by their camelCase name.

        A null socialLinks counts as sent (it clears); other null sections don't.
        """
        sections = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name != 'social_links':
                continue
            sections[to_camel(name)] = value
        return sections


# === Employer sections ===

OrganizationType = Literal[
    '', 'Private Limited', 'Public Limited', 'LLC', 'Non-Profit', 'Startup', 'Government', 'Educational'
]
IndustryType = Literal[
    '', 'Technology', 'Finance', 'Healthcare', 'Education', 'Retail', 'Manufacturing',
    'Real Estate', 'Hospitality', 'Transportation', 'Media', 'Construction', 'Energy',
    'Agriculture', 'Telecommunications', 'Automotive',
]
TeamSize = Literal['', '1-10', '11-50', '51-200', '201-500', '501-1000', '1000+']


class CompanyInfo(SectionModel):
    logo: Optional[str] = None
    banner: Optional[str] = None
    company_name: Optional[str] = None
    about_us: Optional[str] = None


class FoundingInfo(SectionModel):
    organization_type: Optional[OrganizationType] = None
    industry_type: Optional[IndustryType] = None
    team_size: Optional[TeamSize] = None
    year_of_establishment: Optional[date] = None
    company_website: Optional[str] = None
    company_vision: Optional[str] = None

    @field_validator('year_of_establishment', mode='before')
    @classmethod
    def empty_date(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str) and 'T' in value:
            return value.split('T', 1)[0]
        return value


class EmployerProfileUpdate(SectionModel):
    """
    Employer profile write. Contact fields may come nested under
    `contact` (profile form) or flat (direct update); both are accepted.
    """
    company_info: Optional[CompanyInfo] = None
    founding_info: Optional[FoundingInfo] = None
    social_links: Optional[List[SocialLink]] = None
    contact: Optional[ContactSettings] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    profile_image: Optional[str] = None

    @field_validator('social_links', mode='before')
    @classmethod
    def drop_incomplete_links(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [link for link in value if is_valid_social_link(link)]
        return value


ModelT = TypeVar('ModelT', bound=BaseModel)


def parse_section(model: Type[ModelT], raw: Optional[Mapping[str, Any]]) -> ModelT:
    """Validate a raw client payload, translating schema errors to ValidationError."""
    try:
        return model.model_validate(dict(raw or {}))
    except PydanticValidationError as e:
        errors = [
            {'field': '.'.join(str(p) for p in err['loc']), 'message': err['msg']}
            for err in e.errors()
        ]
        raise ValidationError("Invalid profile data", details={'errors': errors}) from e
