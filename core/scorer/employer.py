"""Employer profile completeness.

Nine plain fields worth one unit each, plus two units reserved for
branding: the logo earns 1.5 and the banner 0.5. Percentage is the
filled share of the eleven units.
"""

from typing import Any, Mapping, Optional, Tuple

from core.scorer.models import CompletionScore
from core.utils import is_filled

CONTACT_FIELDS = ('phone', 'email', 'location')
COMPANY_FIELDS = ('companyName', 'aboutUs')
FOUNDING_FIELDS = ('organizationType', 'industryType', 'teamSize', 'companyWebsite')

BRANDING_UNITS = 2
LOGO_UNITS = 1.5
BANNER_UNITS = 0.5


def _section(profile: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = profile.get(key)
    return value if isinstance(value, Mapping) else {}


def count_employer_units(profile: Mapping[str, Any]) -> Tuple[float, int]:
    """Return (filled units, total units) for an employer profile."""
    company = _section(profile, 'companyInfo')
    founding = _section(profile, 'foundingInfo')

    values = [profile.get(name) for name in CONTACT_FIELDS]
    values += [company.get(name) for name in COMPANY_FIELDS]
    values += [founding.get(name) for name in FOUNDING_FIELDS]

    filled = float(sum(1 for value in values if is_filled(value)))
    total = len(values) + BRANDING_UNITS

    if is_filled(company.get('logo')):
        filled += LOGO_UNITS
    if is_filled(company.get('banner')):
        filled += BANNER_UNITS

    return filled, total


def score_employer_profile(profile: Optional[Mapping[str, Any]]) -> CompletionScore:
    filled, total = count_employer_units(profile or {})
    return CompletionScore.from_points(filled / total * 100 if total else 0)
