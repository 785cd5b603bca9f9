import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r'[^\w\s-]')
_SLUG_SPACES = re.compile(r'\s+')
_SLUG_DASHES = re.compile(r'--+')

SECONDS_PER_DAY = 60 * 60 * 24


def is_filled(value: Any) -> bool:
    """Check whether a profile field counts as filled.

    A value counts when it is truthy, non-blank after trimming, and not
    the literal string "null" that form clients send for cleared inputs.
    """
    if not value:
        return False
    if value == 'null':
        return False
    return str(value).strip() != ''


def slugify(text: str) -> str:
    """Lowercase URL slug: drop punctuation, collapse whitespace to dashes."""
    slug = _SLUG_STRIP.sub('', text.lower())
    slug = _SLUG_SPACES.sub('-', slug)
    slug = _SLUG_DASHES.sub('-', slug)
    return slug.strip().strip('-')


def status_key(name: str) -> str:
    """Derive a custom status key from its display name."""
    key = _SLUG_SPACES.sub('-', name.lower().strip())
    return re.sub(r'[^a-z0-9-]', '', key)


def split_csv(value: Union[str, Iterable[str], None]) -> List[str]:
    """Accept either a list or a comma separated string, return trimmed items."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(',')
    else:
        items = list(value)
    return [str(item).strip() for item in items if str(item).strip()]


def escape_like(term: str, escape: str = '\\') -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return (
        term.replace(escape, escape * 2)
        .replace('%', f'{escape}%')
        .replace('_', f'{escape}_')
    )


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_remaining(expiration: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days until expiration, rounded up and floored at zero."""
    if expiration is None:
        return None
    delta = (ensure_utc(expiration) - now).total_seconds()
    return max(math.ceil(delta / SECONDS_PER_DAY), 0)


def days_since(moment: Optional[datetime], now: datetime) -> int:
    if moment is None:
        return 0
    delta = (now - ensure_utc(moment)).total_seconds()
    return max(math.floor(delta / SECONDS_PER_DAY), 0)


def mask_email(email: str) -> str:
    """Mask email address for logging, e.g. "***@example.com"."""
    if not email or '@' not in email:
        return "***"
    _, domain = email.rsplit('@', 1)
    return f"***@{domain}"


def mask_phone(phone: str) -> str:
    """Mask phone number for logging, keeping the last two digits."""
    digits = re.sub(r'\D', '', phone or '')
    if len(digits) <= 2:
        return "***"
    return f"***{digits[-2:]}"
