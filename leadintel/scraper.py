"""
Content Acquisition Module
Fetches a prospect's page through a scraping backend and normalizes it into
AcquiredContent: title, meta description, text content, outbound links and
page metadata. A single attempt per URL; any failure raises AcquisitionError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from pydantic import ValidationError

from leadintel.errors import AcquisitionError
from leadintel.models import AcquiredContent

logger = logging.getLogger(__name__)

FIRECRAWL_SCRAPE_URL = "https://api.firecrawl.dev/v1/scrape"

# Elements to strip from HTML before text extraction
STRIP_ELEMENTS = [
    "script", "style", "nav", "noscript", "iframe", "svg", "form", "button",
]

# Default headers to mimic a browser
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

REQUEST_TIMEOUT = 30
MAX_CONTENT_LENGTH = 50000  # max chars of page text to keep


def _first_text(fields: dict, *keys: str) -> str:
    """First non-empty string among `keys`. List values (duplicate meta tags) yield their first string."""
    for key in keys:
        value = fields.get(key)
        if isinstance(value, list):
            value = next((v for v in value if isinstance(v, str) and v), None)
        if isinstance(value, str) and value:
            return value
    return ""


def validate_url(url: str) -> str:
    """Return the trimmed URL, or raise AcquisitionError if it is not absolute http(s)."""
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc or " " in candidate:
        raise AcquisitionError(candidate or repr(url), "URL must be an absolute http(s) URL")
    return candidate


class ScrapingBackend(ABC):
    """Fetches one URL and returns its normalized content."""

    @abstractmethod
    def fetch(self, url: str) -> AcquiredContent:
        ...

    def close(self) -> None:
        pass


class FirecrawlBackend(ScrapingBackend):
    """Scrapes through the Firecrawl API, asking for markdown and links."""

    def __init__(
        self,
        api_key: str,
        timeout: float = REQUEST_TIMEOUT,
        endpoint: str = FIRECRAWL_SCRAPE_URL,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("Firecrawl API key is required")
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def fetch(self, url: str) -> AcquiredContent:
        url = validate_url(url)
        payload = {
            "url": url,
            "formats": ["markdown", "links"],
            "onlyMainContent": True,
            "timeout": int(self.timeout * 1000),
        }

        logger.info(f"Scraping {url} via Firecrawl...")
        try:
            response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise AcquisitionError(url, f"timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            raise AcquisitionError(url, f"request failed: {e}")

        if not response.ok:
            raise AcquisitionError(url, f"scraping service returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            raise AcquisitionError(url, "scraping service returned a non-JSON response")

        if not isinstance(body, dict):
            raise AcquisitionError(url, "scraping service returned an unexpected response")
        if not body.get("success"):
            raise AcquisitionError(url, str(body.get("error") or "scraping service reported failure"))

        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise AcquisitionError(url, "scraping service returned an unexpected response")
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise AcquisitionError(url, "scraping service returned unexpected metadata")
        links = data.get("links") or []
        if isinstance(links, str):
            links = [links]
        elif not isinstance(links, list):
            links = []

        try:
            content = AcquiredContent(
                url=url,
                title=_first_text(metadata, "title", "ogTitle"),
                description=_first_text(metadata, "description", "ogDescription"),
                content=_first_text(data, "markdown"),
                links=[link for link in links if isinstance(link, str)],
                metadata=metadata,
            )
        except ValidationError as e:
            raise AcquisitionError(url, f"unusable scraping response: {e.error_count()} invalid field(s)")
        logger.info(f"Scraped {url}: {len(content.content)} chars, {len(content.links)} links")
        return content

    def close(self) -> None:
        self.session.close()


def _extract_text(soup: BeautifulSoup) -> str:
    """Strip non-content elements and return readable text."""
    for tag_name in STRIP_ELEMENTS:
        for tag in soup.find_all(tag_name):
            tag.decompose()

    text = soup.get_text(separator="\n", strip=True)
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(line for line in lines if line)

    if len(text) > MAX_CONTENT_LENGTH:
        text = text[:MAX_CONTENT_LENGTH]
    return text


def _extract_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    if title_tag and title_tag.string:
        return title_tag.string.strip()

    og_title = soup.find("meta", property="og:title")
    if og_title and og_title.get("content"):
        return og_title["content"].strip()

    h1 = soup.find("h1")
    if h1:
        return h1.get_text(strip=True)

    return ""


def _extract_description(soup: BeautifulSoup) -> str:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        tag = soup.find("meta", attrs=attrs)
        if tag and tag.get("content"):
            return tag["content"].strip()
    return ""


def _extract_metadata(soup: BeautifulSoup, url: str, status_code: int) -> dict:
    metadata = {"sourceURL": url, "statusCode": status_code}

    html_tag = soup.find("html")
    if html_tag and html_tag.get("lang"):
        metadata["language"] = html_tag["lang"]

    for tag in soup.find_all("meta", property=True):
        prop = tag.get("property", "")
        if prop.startswith("og:") and tag.get("content"):
            metadata[prop] = tag["content"].strip()

    return metadata


def _extract_links(soup: BeautifulSoup, base_url: str) -> list[str]:
    """Absolute http(s) links in document order, deduplicated."""
    found: dict[str, None] = {}  # ordered set via dict
    for a_tag in soup.find_all("a", href=True):
        href = a_tag["href"].strip()
        if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
            continue
        full_url = urljoin(base_url, href)
        if urlparse(full_url).scheme in ("http", "https"):
            found[full_url] = None
    return list(found)


class DirectFetchBackend(ScrapingBackend):
    """Fetches the page itself and parses it with BeautifulSoup."""

    def __init__(self, timeout: float = REQUEST_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def fetch(self, url: str) -> AcquiredContent:
        url = validate_url(url)

        logger.info(f"Fetching {url}...")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise AcquisitionError(url, f"timed out after {self.timeout}s")
        except requests.exceptions.HTTPError as e:
            raise AcquisitionError(url, f"HTTP error: {e}")
        except requests.exceptions.RequestException as e:
            raise AcquisitionError(url, f"request failed: {e}")

        content_type = response.headers.get("Content-Type", "")
        if "text/html" not in content_type and "application/xhtml" not in content_type:
            raise AcquisitionError(url, f"non-HTML content: {content_type or 'unknown'}")

        soup = BeautifulSoup(response.text, "html.parser")
        title = _extract_title(soup)
        description = _extract_description(soup)
        metadata = _extract_metadata(soup, url, response.status_code)
        links = _extract_links(soup, url)
        text = _extract_text(soup)

        logger.info(f"Fetched {url}: {len(text)} chars, {len(links)} links")
        return AcquiredContent(
            url=url,
            title=title,
            description=description,
            content=text,
            links=links,
            metadata=metadata,
        )

    def close(self) -> None:
        self.session.close()


def build_scraper(config) -> ScrapingBackend:
    """Firecrawl when a key is configured, otherwise fetch pages directly."""
    if config.firecrawl_api_key:
        return FirecrawlBackend(api_key=config.firecrawl_api_key, timeout=config.scrape_timeout)
    logger.info("No Firecrawl API key configured, using direct page fetch")
    return DirectFetchBackend(timeout=config.scrape_timeout)
