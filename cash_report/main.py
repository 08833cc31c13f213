"""Orchestration: URL -> scrape -> reputation -> CASH score -> summary -> lead webhook."""

import asyncio
import dataclasses
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Callable
from urllib.parse import urlparse

from .leads import send_lead
from .models import AnalysisResult
from .offers import order_for_display
from .page_quality import page_quality
from .reputation import lookup_reputation
from .scoring import score
from .scraper import scrape_url
from .summary import generate_summary

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """The analysis could not produce a result. Carries the request's correlation id."""

    def __init__(self, message: str, request_id: str):
        super().__init__(message)
        self.message = message
        self.request_id = request_id


class InvalidURLError(AnalysisError):
    """Input rejected before any work is done."""


def new_request_id() -> str:
    return uuid.uuid4().hex


def normalize_url(url: str, request_id: str = "") -> str:
    """Add https:// when the scheme is missing and reject anything without a real host.

    >>> normalize_url("example.com")
    'https://example.com'
    """
    url = (url or "").strip()
    if not url:
        raise InvalidURLError("URL is required", request_id)
    if not re.match(r"^https?://", url, re.I):
        url = f"https://{url}"

    host = urlparse(url).hostname
    if not host or "." not in host or " " in url:
        raise InvalidURLError(f"Invalid URL format: {url}", request_id)
    return url


async def analyze_url(
    url: str,
    email: str | None = None,
    on_progress: Callable[[str], None] | None = None,
    request_id: str | None = None,
) -> AnalysisResult:
    """
    Run a full CASH analysis for a URL.

    Steps:
        1. Validate and normalize the URL
        2. Scrape the homepage (degrades, never fails on fetch errors)
        3. Look up the Google Business Profile (degrades to not found)
        4. Score against the CASH Method
        5. Summarize for outreach (degrades to fallback_summary)
        6. Send the lead to the webhook (failures ignored)

    Raises:
        InvalidURLError: if the URL is unusable
        AnalysisError: if no page content could be obtained at all
    """
    request_id = request_id or new_request_id()

    def _progress(msg: str):
        logger.info("%s [%s]", msg, request_id)
        if on_progress:
            on_progress(msg)

    normalized = normalize_url(url, request_id)

    _progress("Scraping website...")
    try:
        content = await scrape_url(normalized)
    except Exception as e:
        raise AnalysisError(f"Could not obtain any content from {normalized}: {e}", request_id) from e

    _progress("Checking Google Business Profile...")
    reputation = await lookup_reputation(content.html, content.title)
    logger.info("Reputation lookup done [%s] found=%s score=%s", request_id, reputation.found, reputation.score)

    _progress("Scoring against the CASH Method...")
    score_result = score(content, reputation)
    score_result = dataclasses.replace(score_result, offers=order_for_display(score_result.offers))
    logger.info("CASH scores [%s] %s", request_id, score_result.scores)

    _progress("Writing summary...")
    ai_summary = await asyncio.to_thread(generate_summary, content, score_result, request_id)

    result = AnalysisResult(
        request_id=request_id,
        url=normalized,
        timestamp=datetime.now(timezone.utc).isoformat(),
        score=score_result,
        ai_summary=ai_summary,
        reputation=reputation,
        content=content,
        page_quality=page_quality(content),
        client_email=email or None,
    )

    await send_lead(result.to_dict(), request_id)

    _progress("Analysis complete.")
    return result


def analyze_url_sync(
    url: str,
    email: str | None = None,
    on_progress: Callable[[str], None] | None = None,
) -> AnalysisResult:
    """Synchronous wrapper for analyze_url."""
    return asyncio.run(analyze_url(url, email, on_progress))
