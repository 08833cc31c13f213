"""First-generation on-page quality score (clarity, authority, structure, headlines).

Kept alongside the Method score because the PDF report and older lead sheets
still show it. Each dimension starts from a base, moves by fixed steps and is
clamped to 0-100.
"""

import re

from .models import ScrapedContent
from .signals import round_half_up

WEIGHTS = {"clarity": 0.3, "authority": 0.25, "structure": 0.25, "headlines": 0.2}

AUTHORITY_KEYWORDS = [
    "research", "study", "data", "analysis", "expert", "professional",
    "certified", "authority", "evidence", "proven", "verified", "credible",
]
POWER_WORDS = ["ultimate", "complete", "guide", "best", "top", "essential", "proven", "effective"]


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def _word_count(text: str) -> int:
    return len(text.split())


def clarity_score(content: ScrapedContent) -> int:
    score = 50
    words = _word_count(content.text)
    if 500 <= words <= 2000:
        score += 20
    elif 300 <= words <= 3000:
        score += 10
    elif words < 100:
        score -= 30

    sentences = [s for s in re.split(r"[.!?]+", content.text) if s.strip()]
    if sentences:
        words_per_sentence = words / len(sentences)
        if 10 <= words_per_sentence <= 20:
            score += 15
        elif words_per_sentence > 25:
            score -= 15

    if 30 <= len(content.title) <= 60:
        score += 15
    return _clamp(score)


def authority_score(content: ScrapedContent) -> int:
    score = 40
    haystack = content.lowered
    hits = sum(1 for kw in AUTHORITY_KEYWORDS if kw in haystack)
    score += min(30, hits * 5)

    words = _word_count(content.text)
    if words >= 1000:
        score += 20
    elif words >= 500:
        score += 10

    if len(content.title) > 20:
        score += 10
    return _clamp(score)


def structure_score(content: ScrapedContent) -> int:
    score = 50
    count = len(content.headings)
    if 3 <= count <= 10:
        score += 25
    elif count > 10:
        score += 15
    elif count < 2:
        score -= 20

    # First heading is treated as the page's H1.
    if count:
        score += 15

    paragraphs = [p for p in content.text.split("\n\n") if p.strip()]
    if len(paragraphs) >= 3:
        score += 10
    return _clamp(score)


def headlines_score(content: ScrapedContent) -> int:
    score = 50
    if content.title:
        length = len(content.title)
        if 30 <= length <= 60:
            score += 20
        elif 20 <= length <= 70:
            score += 10
        elif length < 10:
            score -= 20

        title = content.title.lower()
        if any(word in title for word in POWER_WORDS):
            score += 10

    if content.headings:
        average = sum(len(h) for h in content.headings) / len(content.headings)
        if 20 <= average <= 60:
            score += 15
        questions = sum(1 for h in content.headings if "?" in h)
        if 0 < questions <= 3:
            score += 10
    return _clamp(score)


def page_quality(content: ScrapedContent) -> dict[str, int]:
    """All four dimensions plus the weighted overall, as a plain dict."""
    scores = {
        "clarity": clarity_score(content),
        "authority": authority_score(content),
        "structure": structure_score(content),
        "headlines": headlines_score(content),
    }
    scores["overall"] = round_half_up(sum(scores[k] * w for k, w in WEIGHTS.items()))
    return scores
