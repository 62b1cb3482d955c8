"""
Webhook Notifier
Best-effort fan-out of stored leads to automation webhooks (n8n). Each hook
is dispatched on a worker thread; failures are logged and reported in the
outcome, never raised to the pipeline caller.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

from leadintel.errors import NotificationError
from leadintel.models import LeadRecord

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 10


@dataclass
class WebhookHook:
    """A webhook endpoint. With `min_score` set it only fires for leads scoring at least that."""
    name: str
    url: str
    min_score: Optional[float] = None

    def accepts(self, record: LeadRecord) -> bool:
        return self.min_score is None or record.lead_score >= self.min_score


@dataclass
class NotificationOutcome:
    hook: str
    ok: bool
    error: Optional[str] = None


class WebhookNotifier:
    """Dispatches lead records to the configured hooks without blocking the caller."""

    def __init__(
        self,
        hooks: list[WebhookHook],
        timeout: float = WEBHOOK_TIMEOUT,
        session: Optional[requests.Session] = None,
        max_workers: int = 4,
    ):
        self.hooks = [h for h in hooks if h.url]
        self.timeout = timeout
        self.session = session or requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="webhook")

    def _post(self, hook: WebhookHook, record: LeadRecord) -> NotificationOutcome:
        payload = {
            "event": hook.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "lead": record.model_dump(mode="json"),
        }
        try:
            response = self.session.post(hook.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            error = NotificationError(f"Webhook '{hook.name}' failed for lead {record.id}: {e}")
            logger.warning(str(error))
            return NotificationOutcome(hook=hook.name, ok=False, error=str(error))

        logger.info(f"Webhook '{hook.name}' notified for lead {record.id}")
        return NotificationOutcome(hook=hook.name, ok=True)

    def dispatch(self, record: LeadRecord) -> list[Future]:
        """Queue every eligible hook for this record and return immediately."""
        futures = []
        for hook in self.hooks:
            if not hook.accepts(record):
                continue
            futures.append(self._executor.submit(self._post, hook, record))
        return futures

    def close(self) -> None:
        """Wait for in-flight dispatches, then release the HTTP session."""
        self._executor.shutdown(wait=True)
        self.session.close()


def build_notifier(config) -> WebhookNotifier:
    hooks = [
        WebhookHook(name="lead.analyzed", url=config.lead_webhook_url),
        WebhookHook(
            name="lead.high_score",
            url=config.high_score_webhook_url,
            min_score=config.high_score_threshold,
        ),
    ]
    return WebhookNotifier(hooks, timeout=config.webhook_timeout)
