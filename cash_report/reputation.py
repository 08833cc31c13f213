"""Google Business Profile lookup for the reputation half of Authority.

Lookup order:
1. Direct link: a Google Maps / g.page link in the site's own markup
2. Places API search by business name (needs GOOGLE_PLACES_API_KEY)

Any failure degrades to a not-found profile. The engine treats a missing
profile and a not-found profile the same way.
"""

import logging
import os
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import httpx
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from .models import NOT_FOUND, ReputationProfile

load_dotenv()

logger = logging.getLogger(__name__)

MAPS_LINK_MARKERS = ("maps.google.com", "google.com/maps", "g.page", "goo.gl/maps", "maps.app.goo.gl")

FIND_PLACE_ENDPOINT = "https://maps.googleapis.com/maps/api/place/findplacefromtext/json"
DETAILS_ENDPOINT = "https://maps.googleapis.com/maps/api/place/details/json"


def find_maps_link(html: str) -> str | None:
    """Return the first Google Maps / Business link in the page markup, if any."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    for a_tag in soup.find_all("a", href=True):
        href = a_tag["href"]
        if any(marker in href for marker in MAPS_LINK_MARKERS):
            return href
    return None


def calculate_reputation_score(
    rating: float | None,
    review_count: int | None,
    last_review_date: datetime | None,
    response_rate: float | None,
    now: datetime | None = None,
) -> int:
    """
    Score a profile 0-100: rating 30, volume 30, recency 20, response rate 20.

    Unknown fields earn nothing.
    """
    now = now or datetime.now(timezone.utc)
    score = 0

    if rating is not None:
        if rating >= 4.8:
            score += 30
        elif rating >= 4.5:
            score += 25
        elif rating >= 4.0:
            score += 15
        else:
            score += 5

    if review_count is not None:
        if review_count >= 100:
            score += 30
        elif review_count >= 50:
            score += 20
        elif review_count >= 20:
            score += 10

    if last_review_date is not None:
        if last_review_date.tzinfo is None:
            last_review_date = last_review_date.replace(tzinfo=timezone.utc)
        days = (now - last_review_date).total_seconds() / 86400
        if days <= 7:
            score += 20
        elif days <= 30:
            score += 15
        elif days <= 90:
            score += 5

    if response_rate is not None:
        if response_rate >= 90:
            score += 20
        elif response_rate >= 50:
            score += 10

    return score


def _query_from_link(link: str) -> str | None:
    """Pull the search text out of a maps link like https://maps.google.com/?q=Acme+Dental."""
    params = parse_qs(urlparse(link).query)
    for key in ("q", "query"):
        if params.get(key):
            return params[key][0]
    return None


async def _search_places(query: str, api_key: str, client: httpx.AsyncClient) -> dict | None:
    response = await client.get(
        FIND_PLACE_ENDPOINT,
        params={"input": query, "inputtype": "textquery", "fields": "place_id", "key": api_key},
    )
    response.raise_for_status()
    candidates = response.json().get("candidates", [])
    if not candidates:
        return None

    response = await client.get(
        DETAILS_ENDPOINT,
        params={
            "place_id": candidates[0]["place_id"],
            "fields": "name,url,rating,user_ratings_total,reviews",
            "reviews_sort": "newest",
            "key": api_key,
        },
    )
    response.raise_for_status()
    return response.json().get("result")


def _profile_from_place(place: dict, method: str, now: datetime | None = None) -> ReputationProfile:
    rating = place.get("rating")
    review_count = place.get("user_ratings_total")
    review_times = [r["time"] for r in place.get("reviews", []) if r.get("time")]
    last_review_date = (
        datetime.fromtimestamp(max(review_times), tz=timezone.utc) if review_times else None
    )
    return ReputationProfile(
        found=True,
        name=place.get("name"),
        url=place.get("url"),
        rating=rating,
        review_count=review_count,
        last_review_date=last_review_date,
        # Places API does not expose owner response rate
        response_rate=None,
        method=method,
        score=calculate_reputation_score(rating, review_count, last_review_date, None, now=now),
    )


async def lookup_reputation(
    html: str,
    business_name: str,
    client: httpx.AsyncClient | None = None,
) -> ReputationProfile:
    """
    Find and score the business's Google Business Profile.

    Args:
        html: Raw homepage markup (may be empty)
        business_name: Best guess at the business name, usually the page title
        client: Optional shared httpx client (tests inject a mock transport)

    Returns:
        ReputationProfile; NOT_FOUND on any failure
    """
    link = find_maps_link(html)
    method = "DIRECT_LINK" if link else "API_SEARCH"
    api_key = os.getenv("GOOGLE_PLACES_API_KEY")

    if not api_key:
        if link:
            logger.info("Maps link found but GOOGLE_PLACES_API_KEY not set; profile unscored")
            return ReputationProfile(found=True, url=link, method=method)
        return NOT_FOUND

    query = (link and _query_from_link(link)) or business_name
    if not query:
        return NOT_FOUND

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=10.0)
    try:
        place = await _search_places(query, api_key, client)
        if not place:
            if link:
                return ReputationProfile(found=True, url=link, method=method)
            return NOT_FOUND
        return _profile_from_place(place, method)
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
        logger.warning("Reputation lookup failed for %r: %s", query, e)
        return NOT_FOUND
    finally:
        if owns_client:
            await client.aclose()
