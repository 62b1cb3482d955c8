"""
Company Analysis Module
Uses Claude to turn scraped website content into a structured company
profile. A failed or malformed response never stops the pipeline: the
stage falls back to a profile built from the page title.
"""

import logging

from pydantic import ValidationError

from leadintel.errors import AnalysisError
from leadintel.llm import GenerativeBackend, extract_json_object
from leadintel.models import AcquiredContent, CompanyProfile, StageResult

logger = logging.getLogger(__name__)

ANALYSIS_CONTENT_BUDGET = 8000

ANALYSIS_SYSTEM_PROMPT = """You are a senior B2B sales research analyst. \
You read a prospective client's website and turn it into a precise, \
factual company briefing for the sales team. Be specific and ground every \
statement in what the website actually says."""

ANALYSIS_PROMPT = """Analyze the following website content for a B2B sales prospect \
and extract company information in JSON format.

Website URL: {url}
Title: {title}
Description: {description}
Content: {content}

Instructions:
1. Be specific. Avoid "Unknown" or generic terms.
2. For "painPoints", infer the problems their customers face that this company solves.
3. For "summary", write a 2-3 sentence executive summary of what this company does, \
written in a professional tone suitable for a sales briefing.

Extract the following information and return ONLY a valid JSON object:
{{
  "companyName": "Company name",
  "industry": "Primary industry/sector",
  "companySize": "Estimated company size (e.g. 1-10, 10-50, 50-200, 200+)",
  "location": "Company location/headquarters",
  "services": ["List of main services or products offered"],
  "painPoints": ["List of customer pain points this company addresses"],
  "targetAudience": "Who are their ideal customers",
  "valueProposition": "Main value proposition",
  "techStack": ["Detected technologies or tools they mention using"],
  "keyFeatures": ["Key features or differentiators"],
  "summary": "2-3 sentence executive summary of the company"
}}

Return ONLY the JSON object, no additional text."""


def build_analysis_prompt(content: AcquiredContent) -> str:
    """Fill the analysis prompt, cutting page text to the content budget."""
    return ANALYSIS_PROMPT.format(
        url=content.url,
        title=content.title,
        description=content.description,
        content=content.content[:ANALYSIS_CONTENT_BUDGET],
    )


def parse_company_profile(response_text: str) -> CompanyProfile:
    """
    Decode and validate an analysis response.

    Raises:
        AnalysisError: If the response holds no JSON object or any required
            field is missing or of the wrong type.
    """
    try:
        data = extract_json_object(response_text)
    except ValueError as e:
        raise AnalysisError(str(e)) from e

    try:
        return CompanyProfile.model_validate(data)
    except ValidationError as e:
        raise AnalysisError(f"Analysis response is missing required fields: {e.error_count()} error(s)") from e


class CompanyAnalyzer:
    """Stage 3: derive a CompanyProfile from acquired content."""

    def __init__(self, backend: GenerativeBackend):
        self.backend = backend

    def analyze(self, content: AcquiredContent) -> StageResult[CompanyProfile]:
        prompt = build_analysis_prompt(content)
        logger.info(f"Analyzing company at {content.url}...")

        try:
            response_text = self.backend.generate(prompt, system=ANALYSIS_SYSTEM_PROMPT, max_tokens=2000)
            profile = parse_company_profile(response_text)
        except Exception as e:
            logger.warning(f"Company analysis failed for {content.url}, using fallback profile: {e}")
            return StageResult(CompanyProfile.fallback(content.title), error=str(e))

        logger.info(f"Analysis complete for {profile.company_name}")
        return StageResult(profile)
