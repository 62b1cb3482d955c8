"""
Lead Scoring
Additive score out of 10: base 5, bonuses for company size, reachable
contacts and how much the profile says about the company.
"""

import re

from leadintel.models import CompanyProfile, ContactBundle

BASE_SCORE = 5.0
MIN_SCORE = 0.0
MAX_SCORE = 10.0

LARGE_SIZE_RE = re.compile(r"50-200|200\+|200-500|500\+|1000\+|\benterprise\b|\blarge\b", re.IGNORECASE)
MID_SIZE_RE = re.compile(r"10-50|\bmid\b|\bmedium\b|mid-size", re.IGNORECASE)


def size_bonus(company_size: str) -> float:
    if LARGE_SIZE_RE.search(company_size or ""):
        return 2.0
    if MID_SIZE_RE.search(company_size or ""):
        return 1.0
    return 0.0


def calculate_lead_score(profile: CompanyProfile, contacts: ContactBundle) -> float:
    """Pure and total: same inputs, same score, always within [0, 10]."""
    score = BASE_SCORE
    score += size_bonus(profile.company_size)

    if contacts.emails:
        score += 1.0
    if contacts.phones:
        score += 0.5
    if contacts.social_links:
        score += 0.5

    if len(profile.services or []) >= 3:
        score += 1.0
    if len(profile.key_features or []) >= 3:
        score += 0.5
    # tech-savvy prospects
    if len(profile.tech_stack or []) >= 2:
        score += 0.5

    return round(min(max(score, MIN_SCORE), MAX_SCORE), 1)
