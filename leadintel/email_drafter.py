"""
Email Drafting Module
Generates a personalized cold outreach email from the company profile.
Supports tone/style customization. When Claude is unavailable or answers
with something other than {"subject", "body"}, a templated email built from
the profile is used instead.
"""

import json
import logging

from leadintel.errors import GenerationError
from leadintel.llm import GenerativeBackend, extract_json_object
from leadintel.models import CompanyProfile, OutreachEmail, StageResult

logger = logging.getLogger(__name__)

TONE_DESCRIPTIONS = {
    "professional": "Professional and polished. Business-appropriate language, clear and direct.",
    "conversational": "Friendly and conversational. Warm but still professional. Like talking to a smart colleague.",
    "bold": "Confident and bold. Direct, slightly provocative, pattern-interrupting. Stands out in an inbox.",
    "consultative": "Thoughtful and consultative. Lead with insights and questions. Position as a strategic advisor.",
}

EMAIL_SYSTEM_PROMPT = """You are a senior sales director at HubCredo, a premium \
AI Automation Agency that acts as a growth partner, not just a vendor.

HubCredo's services:
1. AI Sales Agents that work 24/7.
2. Automated Outbound Engines (n8n + Clay + Instantly).
3. CRM Data Enrichment (Firecrawl).

Social proof: trusted by 50+ companies including ShineX, Zetwerk, and Medlyze \
to automate revenue-generating workflows."""

EMAIL_PROMPT = """Generate a highly personalized, detailed B2B cold email for the following company:

Company: {company_name}
Industry: {industry}
Summary: {summary}
Pain Points: {pain_points}

**Tone/Style:** {tone}
{tone_description}

**Sender Name:** {sender_name}

Email Structure (strictly follow this flow):
1. Subject: high impact, relevant to {company_name}, a single line.
2. The Hook: validate their specific business using the summary. Show you did your research.
3. The Problem: the scaling challenges typical in {industry} (manual lead gen, messy CRMs, slow follow-ups).
4. The Solution: explain how HubCredo solves this. MUST include 3-4 bullet points listing \
specific things we can automate for them.
5. Call to Action: a professional ask for a brief strategy call. Sign off with the sender name.

Return ONLY JSON:
{{
  "subject": "Subject line",
  "body": "Email body (use \\n for line breaks)"
}}"""


def build_email_prompt(profile: CompanyProfile, sender_name: str, tone: str) -> str:
    tone_desc = TONE_DESCRIPTIONS.get(tone, TONE_DESCRIPTIONS["professional"])
    return EMAIL_PROMPT.format(
        company_name=profile.company_name,
        industry=profile.industry,
        summary=profile.summary or "Not available",
        pain_points=", ".join(profile.pain_points) or "Not available",
        tone=tone,
        tone_description=tone_desc,
        sender_name=sender_name,
    )


def fallback_email(profile: CompanyProfile, sender_name: str = "The HubCredo Team") -> OutreachEmail:
    """Deterministic email built only from profile fields."""
    name = profile.company_name
    lines = [
        "Hi there,",
        "",
        f"I've been analyzing {name}'s presence in the {profile.industry} space.",
        "",
    ]
    if profile.pain_points:
        lines.append("Teams like yours often tell us about challenges such as:")
        lines.extend(f"- {point}" for point in profile.pain_points[:3])
        lines.append("")
    lines.extend([
        "At HubCredo, we help companies like yours automate repetitive tasks using AI agents "
        "and tools like n8n and Clay.",
        "",
        "I'd love to show you how we can save your team hours of manual work.",
        "",
        "Open to a quick chat?",
        "",
        "Best regards,",
        sender_name,
    ])
    return OutreachEmail(
        subject=f"Automating {name}'s workflow with AI",
        body="\n".join(lines),
    )


def parse_email(response_text: str) -> OutreachEmail:
    """
    Accept only a {"subject": str, "body": str} object.

    Raises:
        GenerationError: If the response does not have that shape.
    """
    try:
        data = extract_json_object(response_text)
    except ValueError as e:
        raise GenerationError(str(e)) from e

    subject = data.get("subject")
    body = data.get("body")
    if not isinstance(subject, str) or not isinstance(body, str):
        raise GenerationError(f"Email response missing subject/body: {json.dumps(data)[:200]}")
    subject = " ".join(subject.split())
    if not subject or not body.strip():
        raise GenerationError("Email response has an empty subject or body")

    return OutreachEmail(subject=subject, body=body.strip())


class EmailDrafter:
    """Stage 5: draft an outreach email for a profile."""

    def __init__(self, backend: GenerativeBackend, sender_name: str = "The HubCredo Team", tone: str = "professional"):
        self.backend = backend
        self.sender_name = sender_name
        self.tone = tone

    def draft(self, profile: CompanyProfile) -> StageResult[OutreachEmail]:
        prompt = build_email_prompt(profile, self.sender_name, self.tone)
        logger.info(f"Generating email draft for {profile.company_name} (tone: {self.tone})...")

        try:
            response_text = self.backend.generate(prompt, system=EMAIL_SYSTEM_PROMPT, max_tokens=1500)
            email = parse_email(response_text)
        except Exception as e:
            logger.warning(f"Email generation failed for {profile.company_name}, using template: {e}")
            return StageResult(fallback_email(profile, self.sender_name), error=str(e))

        logger.info(f"Email draft generated: \"{email.subject}\"")
        return StageResult(email)
