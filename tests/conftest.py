from datetime import datetime, timezone

import pytest

from cash_report.models import CategoryScores, ScrapedContent, Signal


@pytest.fixture
def now():
    return datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_content():
    def _make(text="", title="Acme", headings=(), html="", url="https://acme.example"):
        return ScrapedContent(title=title, headings=tuple(headings), text=text, html=html, url=url)
    return _make


@pytest.fixture
def make_signals():
    """Signals dict with every score set explicitly; unspecified signals score 10."""
    ids = {
        "content": ["conversion_friction", "intent_signals", "value_proposition", "mobile_experience"],
        "authority": ["review_recency", "credentials", "social_proof", "trust_badges", "reputation_profile"],
        "systems": ["automation"],
        "hypergrowth": ["growth_tracking"],
    }

    def _make(**overrides):
        return {
            category: [
                Signal(id=sid, label=sid, score=overrides.get(sid, 10), notes=f"{sid} note")
                for sid in signal_ids
            ]
            for category, signal_ids in ids.items()
        }
    return _make


@pytest.fixture
def make_scores():
    def _make(content=80, authority=80, systems=80, hypergrowth=80):
        overall = round((content + authority + systems + hypergrowth) / 4)
        return CategoryScores(
            overall=overall, content=content, authority=authority,
            systems=systems, hypergrowth=hypergrowth,
        )
    return _make
