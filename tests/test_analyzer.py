"""Tests for the company analysis stage."""

import json
import pytest
from unittest.mock import MagicMock

from leadintel.analyzer import (
    ANALYSIS_CONTENT_BUDGET,
    CompanyAnalyzer,
    build_analysis_prompt,
    parse_company_profile,
)
from leadintel.errors import AnalysisError, GenerativeBackendError
from leadintel.llm import GenerativeBackend
from leadintel.models import AcquiredContent, CompanyProfile, UNKNOWN


VALID_ANALYSIS = {
    "companyName": "Acme Corp",
    "industry": "Manufacturing",
    "companySize": "50-200",
    "location": "Austin, TX",
    "services": ["Widget Design", "Custom Fabrication", "Repairs"],
    "painPoints": ["Manual quality inspection", "Slow order processing"],
    "targetAudience": "Industrial buyers",
    "valueProposition": "Precision widgets, delivered fast.",
    "techStack": ["SAP", "Salesforce"],
    "keyFeatures": ["ISO 9001", "24h turnaround", "Lifetime warranty"],
    "summary": "Acme builds widgets for enterprise clients.",
}
VALID_ANALYSIS_JSON = json.dumps(VALID_ANALYSIS)


def _make_content(content: str = "Acme builds widgets.") -> AcquiredContent:
    return AcquiredContent(
        url="https://acme.com",
        title="Acme Corp | Home",
        description="Widgets",
        content=content,
    )


def _make_backend(response=None, side_effect=None) -> MagicMock:
    backend = MagicMock(spec=GenerativeBackend)
    if side_effect is not None:
        backend.generate.side_effect = side_effect
    else:
        backend.generate.return_value = response
    return backend


class TestParseCompanyProfile:
    def test_valid(self):
        profile = parse_company_profile(VALID_ANALYSIS_JSON)
        assert profile.company_name == "Acme Corp"
        assert len(profile.services) == 3

    def test_markdown_wrapped(self):
        assert parse_company_profile(f"```json\n{VALID_ANALYSIS_JSON}\n```").industry == "Manufacturing"

    def test_missing_key(self):
        data = dict(VALID_ANALYSIS)
        del data["techStack"]
        with pytest.raises(AnalysisError, match="missing required fields"):
            parse_company_profile(json.dumps(data))

    def test_not_json(self):
        with pytest.raises(AnalysisError):
            parse_company_profile("Sorry, I can't help with that.")


class TestCompanyAnalyzer:
    def test_valid_json_response(self):
        backend = _make_backend(VALID_ANALYSIS_JSON)
        result = CompanyAnalyzer(backend).analyze(_make_content())

        assert not result.degraded
        assert isinstance(result.value, CompanyProfile)
        assert result.value.company_name == "Acme Corp"
        assert result.value.pain_points == ["Manual quality inspection", "Slow order processing"]
        backend.generate.assert_called_once()

    def test_lenient_parsing(self):
        """JSON preceded by extra text should still parse."""
        backend = _make_backend(f"Here is the analysis:\n{VALID_ANALYSIS_JSON}\nDone.")
        result = CompanyAnalyzer(backend).analyze(_make_content())
        assert result.value.company_name == "Acme Corp"

    def test_content_truncation(self):
        backend = _make_backend(VALID_ANALYSIS_JSON)
        CompanyAnalyzer(backend).analyze(_make_content(content="x" * 20000))

        prompt = backend.generate.call_args.args[0]
        assert "x" * ANALYSIS_CONTENT_BUDGET in prompt
        assert "x" * (ANALYSIS_CONTENT_BUDGET + 1) not in prompt

    def test_backend_failure_falls_back(self):
        backend = _make_backend(side_effect=GenerativeBackendError("connection refused"))
        result = CompanyAnalyzer(backend).analyze(_make_content())

        assert result.degraded
        assert "connection refused" in result.error
        assert result.value == CompanyProfile.fallback("Acme Corp | Home")
        assert result.value.industry == UNKNOWN
        assert result.value.summary == ""

    def test_unexpected_exception_falls_back(self):
        backend = _make_backend(side_effect=TimeoutError("read timed out"))
        result = CompanyAnalyzer(backend).analyze(_make_content())
        assert result.degraded
        assert result.value.company_name == "Acme Corp | Home"

    def test_malformed_response_falls_back(self):
        backend = _make_backend('{"companyName": "Acme"}')
        result = CompanyAnalyzer(backend).analyze(_make_content())

        assert result.degraded
        assert result.value.company_name == "Acme Corp | Home"
        assert result.value.services == []
        assert result.value.key_features == []

    def test_prompt_includes_page_details(self):
        prompt = build_analysis_prompt(_make_content())
        assert "https://acme.com" in prompt
        assert "Acme Corp | Home" in prompt
        assert '"painPoints"' in prompt
