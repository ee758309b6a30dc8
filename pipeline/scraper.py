"""Page fetcher for contact research.

httpx fetches the page HTML and BeautifulSoup strips it to readable text,
which the contact researcher hands to the LLM. Failures surface as
ValueError with a short reason so callers can log and move on.
"""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup

import config

logger = logging.getLogger(__name__)

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; OutreachEngine/1.0; "
        "+https://example.com/bot)"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Tags that never carry page content
_NOISE_TAGS = ["script", "style", "nav", "footer", "header", "noscript", "svg", "iframe"]


def html_to_text(html: str) -> str:
    """Strip markup and collapse blank lines."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_NOISE_TAGS):
        tag.decompose()

    text = soup.get_text(separator="\n", strip=True)
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


def normalize_url(url: str) -> str:
    """Trim and add https:// to bare addresses like www.acme.com."""
    url = url.strip()
    if url and "://" not in url:
        url = "https://" + url.lstrip("/")
    return url


def fetch_page_text(
    url: str,
    max_chars: int = config.RESEARCH_SOURCE_MAX_CHARS,
    timeout: float = config.RESEARCH_FETCH_TIMEOUT,
) -> str:
    """Fetch a URL and return at most max_chars of cleaned text.

    Raises ValueError when the page can't be fetched.
    """
    url = normalize_url(url)
    logger.info("Fetching %s", url)
    try:
        response = httpx.get(url, headers=_HEADERS, follow_redirects=True, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ValueError(f"{url} returned HTTP {e.response.status_code}") from e
    except httpx.TimeoutException as e:
        raise ValueError(f"Timeout fetching {url} ({timeout:.0f}s limit)") from e
    except httpx.HTTPError as e:
        raise ValueError(f"Could not fetch {url}: {e}") from e

    text = html_to_text(response.text)
    logger.info("Fetched %d chars of cleaned text from %s", len(text), url)
    return text[:max_chars]
