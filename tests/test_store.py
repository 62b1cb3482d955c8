"""Tests for the JSON lead store."""

import json
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from leadintel.errors import LeadNotFoundError, PersistenceError
from leadintel.models import LeadFilter, LeadRecord, OutreachEmail
from leadintel.store import LeadStore

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _make_record(owner_id="user-1", name="Acme", score=5.0, industry="Manufacturing", minutes=0, summary=""):
    return LeadRecord(
        owner_id=owner_id,
        url=f"https://{name.lower()}.com",
        company_name=name,
        industry=industry,
        company_size="Unknown",
        location="Unknown",
        summary=summary,
        target_audience="Unknown",
        value_proposition="Unknown",
        lead_score=score,
        generated_email=OutreachEmail(subject=f"Hello {name}", body="Hi"),
        analyzed_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def store(tmp_path):
    return LeadStore(str(tmp_path / "db" / "leads.json"))


@pytest.fixture
def populated(store):
    store.create(_make_record(name="Acme", score=9.0, industry="Manufacturing", minutes=1))
    store.create(_make_record(name="Beta", score=6.5, industry="Software / SaaS", minutes=2, summary="Cloud tools"))
    store.create(_make_record(name="Gamma", score=8.0, industry="Healthcare", minutes=3))
    store.create(_make_record(owner_id="user-2", name="Other", score=10.0, minutes=4))
    return store


class TestCreate:
    def test_create_and_find_one(self, store):
        record = _make_record()
        lead_id = store.create(record)

        assert lead_id == record.id
        assert store.find_one(lead_id, "user-1") == record

    def test_persists_across_instances(self, store):
        record = _make_record()
        store.create(record)
        assert LeadStore(str(store.path)).find_one(record.id, "user-1") == record

    def test_does_not_store_page_text(self, store):
        store.create(_make_record())
        raw = json.loads(store.path.read_text())
        assert "content" not in raw[0]["scraped_content"]

    def test_duplicate_id_rejected(self, store):
        record = _make_record()
        store.create(record)
        with pytest.raises(PersistenceError):
            store.create(record)

    def test_write_failure_is_persistence_error(self, store):
        with patch("leadintel.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError, match="disk full"):
                store.create(_make_record())

    def test_corrupt_file_is_persistence_error(self, store):
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text("{not json")
        with pytest.raises(PersistenceError):
            store.count("user-1")


class TestOwnership:
    def test_find_one_other_owner(self, populated):
        other = populated.find(owner_id="user-2")[0]
        with pytest.raises(LeadNotFoundError):
            populated.find_one(other.id, "user-1")

    def test_delete_other_owner(self, populated):
        other = populated.find(owner_id="user-2")[0]
        with pytest.raises(LeadNotFoundError):
            populated.delete(other.id, "user-1")
        assert populated.count("user-2") == 1

    def test_delete(self, populated):
        lead = populated.find(owner_id="user-1")[0]
        populated.delete(lead.id, "user-1")
        assert populated.count("user-1") == 2
        with pytest.raises(LeadNotFoundError):
            populated.find_one(lead.id, "user-1")

    def test_delete_missing(self, store):
        with pytest.raises(LeadNotFoundError):
            store.delete("nope", "user-1")


class TestFind:
    def test_default_newest_first(self, populated):
        names = [r.company_name for r in populated.find("user-1")]
        assert names == ["Gamma", "Beta", "Acme"]

    @pytest.mark.parametrize("sort,expected", [
        ("score-high", ["Acme", "Gamma", "Beta"]),
        ("score-low", ["Beta", "Gamma", "Acme"]),
        ("name", ["Acme", "Beta", "Gamma"]),
    ])
    def test_sorts(self, populated, sort, expected):
        assert [r.company_name for r in populated.find("user-1", sort=sort)] == expected

    def test_unknown_sort(self, populated):
        with pytest.raises(ValueError):
            populated.find("user-1", sort="random")

    def test_pagination(self, populated):
        assert [r.company_name for r in populated.find("user-1", sort="name", page=1, limit=2)] == ["Acme", "Beta"]
        assert [r.company_name for r in populated.find("user-1", sort="name", page=2, limit=2)] == ["Gamma"]
        assert populated.find("user-1", page=3, limit=2) == []

    def test_search(self, populated):
        assert [r.company_name for r in populated.find("user-1", LeadFilter(search="cloud"))] == ["Beta"]

    def test_industry_regex(self, populated):
        assert [r.company_name for r in populated.find("user-1", LeadFilter(industry="^soft"))] == ["Beta"]

    def test_industry_invalid_regex_falls_back_to_substring(self, populated):
        assert populated.count("user-1", LeadFilter(industry="software (")) == 0
        assert populated.count("user-1", LeadFilter(industry="health")) == 1

    def test_score_range(self, populated):
        found = populated.find("user-1", LeadFilter(min_score=7, max_score=8.5))
        assert [r.company_name for r in found] == ["Gamma"]


class TestStats:
    def test_stats(self, populated):
        stats = populated.stats("user-1")
        assert stats.total_leads == 3
        assert stats.avg_score == 7.8
        assert stats.high_score_leads == 2

    def test_empty(self, store):
        stats = store.stats("nobody")
        assert stats.total_leads == 0
        assert stats.avg_score == 0.0
        assert stats.high_score_leads == 0

    def test_average_rounds_half_up(self, store):
        store.create(_make_record(name="Acme", score=7.0))
        store.create(_make_record(name="Beta", score=7.5))
        assert store.stats("user-1").avg_score == 7.3
