import asyncio
from datetime import timedelta

import httpx

from cash_report.models import NOT_FOUND
from cash_report.reputation import calculate_reputation_score, find_maps_link, lookup_reputation

SITE_HTML = '<html><body><a href="/about">About</a><a href="https://maps.google.com/?q=Bright+Dental">Find us</a></body></html>'


def test_perfect_profile_scores_100(now):
    assert calculate_reputation_score(4.9, 150, now - timedelta(days=1), 100, now=now) == 100


def test_middling_profile(now):
    # rating 15 + volume 10 + recency 5 + response 0
    assert calculate_reputation_score(4.2, 25, now - timedelta(days=45), 20, now=now) == 30


def test_unknown_fields_earn_nothing(now):
    assert calculate_reputation_score(None, None, None, None, now=now) == 0


def test_find_maps_link():
    assert find_maps_link(SITE_HTML) == "https://maps.google.com/?q=Bright+Dental"
    assert find_maps_link('<a href="https://g.page/bright-dental">Reviews</a>') == "https://g.page/bright-dental"
    assert find_maps_link("<a href='/contact'>Contact</a>") is None
    assert find_maps_link("") is None


def test_lookup_without_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)

    profile = asyncio.run(lookup_reputation(SITE_HTML, "Bright Dental"))
    assert profile.found
    assert profile.method == "DIRECT_LINK"
    assert profile.score == 0

    assert asyncio.run(lookup_reputation("<p>no links</p>", "Bright Dental")) == NOT_FOUND


def test_lookup_with_places_api(monkeypatch):
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "test-key")
    seen_queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        if "findplacefromtext" in request.url.path:
            seen_queries.append(request.url.params["input"])
            return httpx.Response(200, json={"candidates": [{"place_id": "abc"}]})
        return httpx.Response(200, json={"result": {
            "name": "Bright Dental",
            "url": "https://maps.google.com/?cid=1",
            "rating": 4.9,
            "user_ratings_total": 210,
            "reviews": [{"time": 1700000000}, {"time": 1600000000}],
        }})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await lookup_reputation(SITE_HTML, "ignored title", client=client)

    profile = asyncio.run(run())
    assert seen_queries == ["Bright Dental"]
    assert profile.found
    assert profile.method == "DIRECT_LINK"
    assert profile.rating == 4.9
    assert profile.review_count == 210
    assert profile.last_review_date.timestamp() == 1700000000
    # rating + volume, review far in the past, no response rate
    assert profile.score == 60


def test_lookup_degrades_on_api_error(monkeypatch):
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await lookup_reputation("", "Bright Dental", client=client)

    assert asyncio.run(run()) == NOT_FOUND


def test_lookup_degrades_on_malformed_place(monkeypatch):
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        if "findplacefromtext" in request.url.path:
            return httpx.Response(200, json={"candidates": [{"place_id": "abc"}]})
        return httpx.Response(200, json={"result": {"name": "Bright Dental", "rating": 4.1, "reviews": None}})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await lookup_reputation("", "Bright Dental", client=client)

    assert asyncio.run(run()) == NOT_FOUND
