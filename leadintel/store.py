"""
Lead Store
JSON-file backed storage for lead records. Every operation is scoped to the
owning user; one owner can never read or delete another owner's leads.
"""

import json
import logging
import math
import os
import re
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from leadintel.errors import LeadNotFoundError, PersistenceError
from leadintel.models import LeadFilter, LeadRecord, LeadStats

logger = logging.getLogger(__name__)

HIGH_SCORE_THRESHOLD = 8.0

SORT_KEYS = {
    "newest": (lambda r: r.analyzed_at, True),
    "score-high": (lambda r: r.lead_score, True),
    "score-low": (lambda r: r.lead_score, False),
    "name": (lambda r: r.company_name.lower(), False),
}


def _matches(record: LeadRecord, filters: Optional[LeadFilter]) -> bool:
    if filters is None:
        return True

    if filters.search:
        needle = filters.search.lower()
        haystack = " ".join([record.company_name, record.industry, record.summary]).lower()
        if needle not in haystack:
            return False

    if filters.industry:
        try:
            if not re.search(filters.industry, record.industry, re.IGNORECASE):
                return False
        except re.error:
            if filters.industry.lower() not in record.industry.lower():
                return False

    if filters.min_score is not None and record.lead_score < filters.min_score:
        return False
    if filters.max_score is not None and record.lead_score > filters.max_score:
        return False
    return True


class LeadStore:
    """Stores leads as a JSON list in a single file, rewritten atomically."""

    def __init__(self, path: str, high_score_threshold: float = HIGH_SCORE_THRESHOLD):
        self.path = Path(path)
        self.high_score_threshold = high_score_threshold
        self._lock = threading.Lock()

    def _load(self) -> list[LeadRecord]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            return [LeadRecord.model_validate(r) for r in raw]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            raise PersistenceError(f"Could not read lead store {self.path}: {e}") from e

    def _save(self, records: list[LeadRecord]) -> None:
        payload = json.dumps([r.model_dump(mode="json") for r in records], indent=2)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write lead store {self.path}: {e}") from e

    def create(self, record: LeadRecord) -> str:
        """Durably add one record and return its id."""
        with self._lock:
            records = self._load()
            if any(r.id == record.id for r in records):
                raise PersistenceError(f"Lead {record.id} already exists")
            records.append(record)
            self._save(records)
        logger.info(f"Lead stored: {record.id} ({record.company_name}) for owner {record.owner_id}")
        return record.id

    def _owned(self, owner_id: str, filters: Optional[LeadFilter] = None) -> list[LeadRecord]:
        with self._lock:
            records = self._load()
        return [r for r in records if r.owner_id == owner_id and _matches(r, filters)]

    def find(
        self,
        owner_id: str,
        filters: Optional[LeadFilter] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 10,
    ) -> list[LeadRecord]:
        """One page of the owner's leads, filtered and sorted."""
        if sort not in SORT_KEYS:
            raise ValueError(f"Unknown sort '{sort}' - valid sorts: {sorted(SORT_KEYS)}")
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        key, reverse = SORT_KEYS[sort]
        records = sorted(self._owned(owner_id, filters), key=key, reverse=reverse)
        skip = (page - 1) * limit
        return records[skip:skip + limit]

    def count(self, owner_id: str, filters: Optional[LeadFilter] = None) -> int:
        return len(self._owned(owner_id, filters))

    def find_one(self, lead_id: str, owner_id: str) -> LeadRecord:
        for record in self._owned(owner_id):
            if record.id == lead_id:
                return record
        raise LeadNotFoundError(lead_id)

    def delete(self, lead_id: str, owner_id: str) -> None:
        with self._lock:
            records = self._load()
            remaining = [r for r in records if not (r.id == lead_id and r.owner_id == owner_id)]
            if len(remaining) == len(records):
                raise LeadNotFoundError(lead_id)
            self._save(remaining)
        logger.info(f"Lead deleted: {lead_id} for owner {owner_id}")

    def stats(self, owner_id: str) -> LeadStats:
        records = self._owned(owner_id)
        if not records:
            return LeadStats()
        avg = sum(r.lead_score for r in records) / len(records)
        return LeadStats(
            total_leads=len(records),
            avg_score=math.floor(avg * 10 + 0.5) / 10,
            high_score_leads=sum(1 for r in records if r.lead_score >= self.high_score_threshold),
        )
