"""
Lead Analysis Pipeline
Orchestrates one lead per URL:

    acquire -> (extract contacts || analyze company) -> score -> draft email
            -> persist -> notify

Only acquisition and persistence failures reach the caller. Analysis and
drafting fall back to deterministic values, and webhook failures are logged.
Supports single URL and bulk mode.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

from leadintel.analyzer import CompanyAnalyzer
from leadintel.config import PipelineConfig
from leadintel.contacts import extract_contacts
from leadintel.email_drafter import EmailDrafter
from leadintel.errors import AcquisitionError, PersistenceError
from leadintel.llm import ClaudeBackend, GenerativeBackend
from leadintel.models import (
    AcquiredContent,
    CompanyProfile,
    ContactBundle,
    LeadRecord,
    OutreachEmail,
    ScrapeSnapshot,
)
from leadintel.notifier import WebhookNotifier, build_notifier
from leadintel.scoring import calculate_lead_score
from leadintel.scraper import ScrapingBackend, build_scraper
from leadintel.store import LeadStore

logger = logging.getLogger(__name__)


def assemble_record(
    owner_id: str,
    content: AcquiredContent,
    contacts: ContactBundle,
    profile: CompanyProfile,
    score: float,
    email: OutreachEmail,
) -> LeadRecord:
    """Merge stage outputs into one record. Only the scrape snapshot is kept, not the page text."""
    return LeadRecord(
        owner_id=owner_id,
        url=content.url,
        company_name=profile.company_name,
        industry=profile.industry,
        company_size=profile.company_size,
        location=profile.location,
        summary=profile.summary,
        services=list(profile.services),
        pain_points=list(profile.pain_points),
        target_audience=profile.target_audience,
        value_proposition=profile.value_proposition,
        tech_stack=list(profile.tech_stack),
        key_features=list(profile.key_features),
        lead_score=score,
        contacts=contacts,
        generated_email=email,
        scraped_content=ScrapeSnapshot(
            title=content.title,
            description=content.description,
            metadata=dict(content.metadata),
        ),
    )


@dataclass
class BulkItem:
    """Outcome for one URL of a bulk run."""
    url: str
    record: Optional[LeadRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass
class BulkReport:
    items: list[BulkItem] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if not item.ok)


class LeadPipeline:
    """
    Turns a URL into a stored, scored lead.

    Collaborators are injected; the pipeline owns none of them beyond
    `close()`, which the process entry point calls on shutdown.
    """

    def __init__(
        self,
        scraper: ScrapingBackend,
        generator: GenerativeBackend,
        store: LeadStore,
        notifier: Optional[WebhookNotifier] = None,
        sender_name: str = "The HubCredo Team",
        tone: str = "professional",
        max_workers: int = 4,
    ):
        self.scraper = scraper
        self.generator = generator
        self.store = store
        self.notifier = notifier
        self.analyzer = CompanyAnalyzer(generator)
        self.drafter = EmailDrafter(generator, sender_name=sender_name, tone=tone)
        self.max_workers = max_workers
        self._stage_pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analysis")

    def acquire(self, url: str) -> AcquiredContent:
        return self.scraper.fetch(url)

    def analyze(
        self,
        url: str,
        owner_id: str,
        progress_callback: Optional[Callable[[str], None]] = None,
    ) -> LeadRecord:
        """
        Run the full pipeline for a single URL.

        Raises:
            AcquisitionError: If the page could not be fetched.
            PersistenceError: If the record could not be stored.
        """
        def _log(msg: str):
            logger.info(msg)
            if progress_callback:
                progress_callback(msg)

        _log(f"Phase 1: Scraping {url}...")
        try:
            content = self.acquire(url)
        except AcquisitionError as e:
            logger.error(f"Acquisition failed: {e}")
            raise

        _log("Phase 2: Extracting contacts and analyzing company...")
        analysis_future = self._stage_pool.submit(self.analyzer.analyze, content)
        contacts = extract_contacts(content.content, content.links)
        analysis = analysis_future.result()
        profile = analysis.value
        _log(
            f"Found {len(contacts.emails)} email(s), {len(contacts.phones)} phone(s), "
            f"{len(contacts.social_links)} social link(s); "
            f"analysis {'degraded' if analysis.degraded else 'complete'}: {profile.company_name}"
        )

        _log("Phase 3: Scoring lead...")
        score = calculate_lead_score(profile, contacts)
        _log(f"Lead score: {score}")

        _log("Phase 4: Drafting outreach email...")
        drafted = self.drafter.draft(profile)
        _log(f"Draft ready: \"{drafted.value.subject}\"")

        _log("Phase 5: Saving lead...")
        record = assemble_record(owner_id, content, contacts, profile, score, drafted.value)
        try:
            self.store.create(record)
        except PersistenceError as e:
            logger.error(f"Persistence failed for {url}: {e}")
            raise

        if self.notifier is not None:
            _log("Phase 6: Notifying webhooks...")
            self.notifier.dispatch(record)

        _log(f"Lead saved: {record.company_name} ({record.id})")
        return record

    def analyze_bulk(
        self,
        urls: list[str],
        owner_id: str,
        max_workers: Optional[int] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ) -> BulkReport:
        """
        Run the pipeline for every URL independently.
        A failing URL is recorded in the report and never stops the others.
        """
        def _run(url: str) -> BulkItem:
            try:
                return BulkItem(url=url, record=self.analyze(url, owner_id))
            except (AcquisitionError, PersistenceError) as e:
                return BulkItem(url=url, error=str(e))
            except Exception as e:
                logger.exception(f"Unexpected failure analyzing {url}")
                return BulkItem(url=url, error=f"unexpected error: {e}")

        workers = max(1, min(max_workers or self.max_workers, len(urls) or 1))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk") as pool:
            items = list(pool.map(_run, urls))

        report = BulkReport(items=items)
        msg = f"Bulk run complete: {report.succeeded} succeeded, {report.failed} failed"
        logger.info(msg)
        if progress_callback:
            progress_callback(msg)
        return report

    def close(self) -> None:
        self._stage_pool.shutdown(wait=True)
        if self.notifier is not None:
            self.notifier.close()
        self.generator.close()
        self.scraper.close()

    def __enter__(self) -> "LeadPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def build_pipeline(config: PipelineConfig) -> LeadPipeline:
    """Construct every collaborator once for this process."""
    return LeadPipeline(
        scraper=build_scraper(config),
        generator=ClaudeBackend(
            api_key=config.anthropic_api_key,
            model=config.llm_model,
            timeout=config.llm_timeout,
        ),
        store=LeadStore(config.leads_db_path, high_score_threshold=config.high_score_threshold),
        notifier=build_notifier(config),
        sender_name=config.sender_name,
        tone=config.tone,
        max_workers=config.bulk_max_workers,
    )
