"""Single-page Playwright scraper for the CASH audit.

Scrapes the homepage only. Never raises on fetch problems: a blocked or dead
site comes back as degraded content (hostname as title, empty markup) so the
analysis can still run on the domain and external signals.
"""

import asyncio
import logging
import os
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from dotenv import load_dotenv
from playwright.async_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from .models import ScrapedContent

load_dotenv()

logger = logging.getLogger(__name__)

SCRAPE_TIMEOUT_MS = int(os.getenv("SCRAPE_TIMEOUT_MS", "30000"))
MAX_TEXT_CHARS = 10000
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0"


async def scrape_url(url: str) -> ScrapedContent:
    """
    Scrape a single page into ScrapedContent.

    Args:
        url: Absolute http(s) URL

    Returns:
        ScrapedContent; degraded_content(url) if the page could not be loaded
    """
    try:
        async with async_playwright() as p:
            browser = await p.firefox.launch(headless=True)
            try:
                context = await browser.new_context(
                    user_agent=USER_AGENT,
                    viewport={"width": 1920, "height": 1080},
                    locale="en-US",
                )
                page = await context.new_page()
                await page.goto(url, timeout=SCRAPE_TIMEOUT_MS, wait_until="networkidle")
                await page.wait_for_timeout(1000)
                html = await page.content()
            finally:
                await browser.close()
    except (PlaywrightTimeout, PlaywrightError, OSError) as e:
        logger.warning("Scraping failed for %s: %s", url, e)
        return degraded_content(url)

    return extract_content(html, url)


def extract_content(html: str, url: str) -> ScrapedContent:
    """Pull title, headings and visible text out of raw markup."""
    soup = BeautifulSoup(html, "html.parser")

    title = ""
    title_tag = soup.find("title")
    if title_tag:
        title = title_tag.get_text(strip=True)
    if not title:
        h1_tag = soup.find("h1")
        title = h1_tag.get_text(strip=True) if h1_tag else "No title found"

    headings: list[str] = []
    for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        heading = tag.get_text(strip=True)
        if heading:
            headings.append(heading)

    return ScrapedContent(
        title=title,
        headings=tuple(headings),
        text=_extract_text(soup),
        html=html,
        url=url,
    )


def _extract_text(soup: BeautifulSoup) -> str:
    """Visible body text with nav/header/footer/scripts removed, whitespace collapsed."""
    for el in soup.find_all(["script", "style", "noscript", "nav", "header", "footer", "aside"]):
        el.decompose()

    body = soup.body or soup
    text = " ".join(body.get_text(separator=" ").split())
    return text[:MAX_TEXT_CHARS]


def degraded_content(url: str) -> ScrapedContent:
    """Stand-in content when the page can't be fetched (403s, timeouts, dead hosts)."""
    return ScrapedContent(
        title=urlparse(url).hostname or url,
        headings=(),
        text=f"Scraping failed for {url}. Analyzing based on domain name and external signals.",
        html="",
        url=url,
    )


def scrape_url_sync(url: str) -> ScrapedContent:
    """Synchronous wrapper for scrape_url."""
    return asyncio.run(scrape_url(url))
