"""
Pipeline Errors
Only AcquisitionError and PersistenceError ever reach the caller of the
pipeline. Degradable errors are absorbed into fallback values and
notification errors are logged and dropped.
"""


class LeadIntelError(Exception):
    """Base class for every error raised by the lead pipeline."""


class AcquisitionError(LeadIntelError):
    """The page content could not be fetched. Terminal for the run."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to scrape {url}: {reason}")


class DegradableError(LeadIntelError):
    """A generative stage failed and its fallback value should be used."""


class AnalysisError(DegradableError):
    pass


class GenerationError(DegradableError):
    pass


class PersistenceError(LeadIntelError):
    """The lead store could not record or read a lead. Terminal for the run."""


class LeadNotFoundError(LeadIntelError):
    """No lead with that id belongs to the requesting owner."""

    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        super().__init__(f"Lead not found: {lead_id}")


class NotificationError(LeadIntelError):
    """A webhook dispatch failed. Logged, never raised to the caller."""


class GenerativeBackendError(DegradableError):
    """The generative service could not be reached or returned nothing usable."""
