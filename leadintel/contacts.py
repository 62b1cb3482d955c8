"""
Contact Extraction Module
Pattern matching over scraped text and links. Pure and synchronous: the same
input always yields the same ContactBundle, and nothing here raises.
"""

import re
from typing import Iterable
from urllib.parse import urlparse

import phonenumbers

from leadintel.models import ContactBundle

MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15  # E.164 upper bound

# Region assumed for numbers written without a country code
DEFAULT_PHONE_REGION = "US"

SOCIAL_DOMAINS = frozenset({
    "linkedin.com",
    "twitter.com",
    "x.com",
    "facebook.com",
    "instagram.com",
    "youtube.com",
    "tiktok.com",
    "github.com",
})

# Regex for email addresses: standard addr-spec, only starting at a token boundary
_EMAIL_RE = re.compile(r"(?<![\w.%+\-])[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

# Addresses that are really asset references (e.g. logo@2x.png)
_JUNK_EMAIL_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".css", ".js")

# Optional country code, optional area code in parentheses, then 2-5 digit
# groups joined by a space, dot or dash
_PHONE_RE = re.compile(
    r"(?<![\w+])"
    r"(?:\+\d{1,3}[\s.\-]?)?"
    r"(?:\(\d{1,4}\)[\s.\-]?)?"
    r"\d{2,5}(?:[\s.\-]?\d{2,5}){1,4}"
    r"(?!\d)"
)

_DATE_RES = (
    re.compile(r"^\d{4}[\-/.]\d{1,2}[\-/.]\d{1,2}$"),
    re.compile(r"^\d{1,2}[\-/.]\d{1,2}[\-/.]\d{2,4}$"),
    re.compile(r"^(?:19|20)\d{2}\s*-\s*(?:19|20)\d{2}$"),
)


def extract_emails(text: str) -> frozenset[str]:
    found = set()
    for match in _EMAIL_RE.findall(text or ""):
        email = match.lower().strip(".")
        if email.endswith(_JUNK_EMAIL_EXTENSIONS):
            continue
        found.add(email)
    return frozenset(found)


def _looks_like_date(candidate: str) -> bool:
    return any(pattern.match(candidate) for pattern in _DATE_RES)


def _is_dialable(candidate: str, region: str) -> bool:
    try:
        number = phonenumbers.parse(candidate, region)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_valid_number(number)


def extract_phones(
    text: str,
    min_digits: int = MIN_PHONE_DIGITS,
    region: str = DEFAULT_PHONE_REGION,
) -> frozenset[str]:
    """Phone numbers as written on the page, kept only if valid for their country."""
    found = set()
    for match in _PHONE_RE.finditer(text or ""):
        candidate = re.sub(r"\s+", " ", match.group(0).strip())
        digit_count = sum(ch.isdigit() for ch in candidate)
        if digit_count < min_digits or digit_count > MAX_PHONE_DIGITS:
            continue
        if _looks_like_date(candidate) or not _is_dialable(candidate, region):
            continue
        found.add(candidate)
    return frozenset(found)


def _is_social_host(host: str) -> bool:
    host = host.lower().split(":")[0]
    for prefix in ("www.", "m."):
        if host.startswith(prefix):
            host = host[len(prefix):]
    return any(host == domain or host.endswith("." + domain) for domain in SOCIAL_DOMAINS)


def extract_social_links(links: Iterable[str]) -> frozenset[str]:
    found = set()
    for link in links or ():
        if not isinstance(link, str):
            continue
        link = link.strip()
        parsed = urlparse(link)
        if parsed.scheme in ("http", "https") and _is_social_host(parsed.netloc):
            found.add(link)
    return frozenset(found)


def extract_contacts(text: str, links: Iterable[str]) -> ContactBundle:
    """Build the contact bundle for one page. Absence yields empty sets."""
    return ContactBundle(
        emails=extract_emails(text),
        phones=extract_phones(text),
        social_links=extract_social_links(links),
    )
