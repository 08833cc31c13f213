"""CASH Method scoring: category aggregation, issue ranking and the monetized-loss hook.

`score()` is pure and synchronous. Same content + profile (+ clock) in,
same ScoreResult out.
"""

from datetime import datetime

from .classifier import detect_business_type
from .models import (
    HIGH,
    MEDIUM,
    NOT_FOUND,
    UNCLASSIFIED,
    CategoryScores,
    PriorityIssue,
    ReputationProfile,
    ScoreResult,
    ScrapedContent,
    Signal,
)
from .offers import generate_offers
from .signals import MAX_SIGNAL_SCORE, calculate_signals, round_half_up

CATEGORY_WEIGHTS = {
    "content": 0.25,
    "authority": 0.25,
    "systems": 0.25,
    "hypergrowth": 0.25,
}
REPUTATION_WEIGHT = 0.5

ISSUE_CATEGORY_THRESHOLD = 50
ISSUE_SIGNAL_THRESHOLD = 5
HIGH_SEVERITY_THRESHOLD = 30
MAX_PRIORITY_ISSUES = 5

# Assumed missed calls per month. Sales copy quotes the resulting figure.
FIXED_MONTHLY_MISSED_CALLS = 90
DEFAULT_PER_LEAD_VALUE = 200
PER_LEAD_VALUE = {
    "dentist": 600,
    "law firm": 1500,
    "property management": 1200,
    "med spa": 500,
    "chiropractor": 300,
    "veterinarian": 250,
    "hvac": 450,
    "plumber": 400,
    "roofing": 900,
    "auto repair": 350,
    "real estate": 1000,
    "insurance agency": 700,
    "restaurant": 60,
    "salon": 80,
    "fitness": 120,
}


def normalize(signals: list[Signal]) -> int:
    """Percentage of the maximum possible score across `signals`."""
    if not signals:
        return 0
    total = sum(s.score for s in signals)
    return round_half_up(100 * total / (MAX_SIGNAL_SCORE * len(signals)))


def blend_authority(on_page_score: int, profile: ReputationProfile | None) -> int:
    reputation = (profile or NOT_FOUND).score
    return round_half_up((1 - REPUTATION_WEIGHT) * on_page_score + REPUTATION_WEIGHT * reputation)


def overall_score(content: int, authority: int, systems: int, hypergrowth: int) -> int:
    return round_half_up(
        content * CATEGORY_WEIGHTS["content"]
        + authority * CATEGORY_WEIGHTS["authority"]
        + systems * CATEGORY_WEIGHTS["systems"]
        + hypergrowth * CATEGORY_WEIGHTS["hypergrowth"]
    )


def aggregate(signals: dict[str, list[Signal]], profile: ReputationProfile | None) -> CategoryScores:
    """Roll signals up into category scores.

    The reputation pass-through is display-only: it is excluded from the on-page
    authority average and the profile's own 0-100 score is blended in afterwards.
    """
    on_page_authority = [s for s in signals["authority"] if s.id != "reputation_profile"]
    content = normalize(signals["content"])
    authority = blend_authority(normalize(on_page_authority), profile)
    systems = normalize(signals["systems"])
    hypergrowth = normalize(signals["hypergrowth"])
    return CategoryScores(
        overall=overall_score(content, authority, systems, hypergrowth),
        content=content,
        authority=authority,
        systems=systems,
        hypergrowth=hypergrowth,
    )


def rank_issues(scores: CategoryScores, signals: dict[str, list[Signal]]) -> list[PriorityIssue]:
    """One issue per weak category: its first weak signal, in emission order."""
    issues: list[PriorityIssue] = []
    for category, category_signals in signals.items():
        category_score = getattr(scores, category)
        if category_score >= ISSUE_CATEGORY_THRESHOLD:
            continue
        weakest = next((s for s in category_signals if s.score < ISSUE_SIGNAL_THRESHOLD), None)
        if weakest is None:
            continue
        severity = HIGH if category_score < HIGH_SEVERITY_THRESHOLD else MEDIUM
        issues.append(PriorityIssue(id=weakest.id, label=weakest.notes, severity=severity))
    return issues[:MAX_PRIORITY_ISSUES]


def per_lead_value(business_type: str | None) -> int:
    return PER_LEAD_VALUE.get((business_type or UNCLASSIFIED).lower(), DEFAULT_PER_LEAD_VALUE)


def estimate_monetized_loss(systems_score: int, automation_score: int, business_type: str | None) -> int | None:
    """Monthly dollars lost to missed calls, or None when there is no automation gap.

    None means "not applicable" and is deliberately different from 0.
    """
    if systems_score >= ISSUE_CATEGORY_THRESHOLD and automation_score >= ISSUE_SIGNAL_THRESHOLD:
        return None
    return FIXED_MONTHLY_MISSED_CALLS * per_lead_value(business_type)


def score(
    content: ScrapedContent,
    reputation_profile: ReputationProfile | None = None,
    *,
    now: datetime | None = None,
) -> ScoreResult:
    """Score a scraped page against the CASH Method.

    Args:
        content: Scraped page content
        reputation_profile: External reputation summary; None is treated as not found
        now: Reference time for review-age checks (default: current UTC time)

    Returns:
        ScoreResult with category scores, signals, priority issues and offers
    """
    business_type = detect_business_type(content.lowered)
    if business_type == UNCLASSIFIED:
        business_type = None

    signals = calculate_signals(content, reputation_profile)
    scores = aggregate(signals, reputation_profile)

    automation = signals["systems"][0]
    loss = estimate_monetized_loss(scores.systems, automation.score, business_type)

    return ScoreResult(
        scores=scores,
        signals=signals,
        priority_issues=rank_issues(scores, signals),
        offers=generate_offers(scores, signals, reputation_profile, loss, now=now),
        detected_business_type=business_type,
    )
