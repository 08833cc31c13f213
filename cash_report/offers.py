"""Offer catalog: which productized fixes to pitch for a scored site.

Rules run in a fixed order and each one decides independently whether to
append its offer. Only the first MAX_OFFERS survive, in rule order; display
ordering is a separate step (`order_for_display`).
"""

from datetime import datetime, timedelta, timezone

from .models import (
    HIGH,
    MEDIUM,
    PRIORITY_RANK,
    CategoryScores,
    Offer,
    ReputationProfile,
    Signal,
)

MAX_OFFERS = 4
FLAGSHIP_OFFER_ID = "ai_receptionist"

STRONG_CATEGORY = 70
WEAK_CATEGORY = 50
WEAK_SIGNAL = 5

MIN_RATING = 4.5
MIN_REVIEW_COUNT = 40
MAX_REVIEW_AGE = timedelta(days=90)


def _find(signals: dict[str, list[Signal]], category: str, signal_id: str) -> Signal | None:
    return next((s for s in signals.get(category, []) if s.id == signal_id), None)


def _is_weak(signal: Signal | None) -> bool:
    return signal is not None and signal.score < WEAK_SIGNAL


def _trust_offers(scores: CategoryScores, signals: dict[str, list[Signal]]) -> list[Offer]:
    if scores.authority >= STRONG_CATEGORY:
        return []

    offers = []
    on_page = [s for s in signals["authority"] if s.id != "reputation_profile"]
    weak = [s for s in on_page if s.score < WEAK_SIGNAL]
    if len(weak) >= 2:
        offers.append(Offer(
            id="trust_package",
            label="Authenticity & Trust Overhaul",
            reason=weak[0].notes,
            priority=HIGH,
        ))

    reviews = _find(signals, "authority", "review_recency")
    if _is_weak(reviews):
        offers.append(Offer(
            id="review_management",
            label="Review Generation & Management",
            reason=reviews.notes,
            priority=MEDIUM,
        ))
    return offers


def _review_age(profile: ReputationProfile, now: datetime) -> timedelta | None:
    if profile.last_review_date is None:
        return None
    last = profile.last_review_date
    if last.tzinfo is None:
        last = last.replace(tzinfo=timezone.utc)
    return now - last


def _reputation_offers(profile: ReputationProfile | None, now: datetime) -> list[Offer]:
    offers = []

    if profile is not None and profile.found:
        problems = []
        if profile.rating is not None and profile.rating < MIN_RATING:
            problems.append(f"Your {profile.rating:.1f}-star rating is below the {MIN_RATING} customers expect.")
        if profile.review_count is not None and profile.review_count < MIN_REVIEW_COUNT:
            problems.append(f"Only {profile.review_count} reviews; competitors in the map pack have {MIN_REVIEW_COUNT}+.")
        age = _review_age(profile, now)
        if age is not None and age > MAX_REVIEW_AGE:
            problems.append(f"Your newest review is {age.days} days old.")
        if problems:
            offers.append(Offer(
                id="reputation_resurrection",
                label="Reputation Resurrection",
                reason=" ".join(problems),
                priority=HIGH,
            ))

    if profile is None or not profile.found:
        offers.append(Offer(
            id="local_visibility",
            label="Google Business Profile Setup",
            reason="Critical authority signal missing: no Google Business Profile found, so you don't show up in local map results.",
            priority=HIGH,
        ))
    elif profile.score < WEAK_CATEGORY:
        offers.append(Offer(
            id="local_visibility",
            label="Local Visibility Boost",
            reason=f"Your Google Business Profile scores {profile.score}/100. Competitors with stronger profiles take the map-pack calls.",
            priority=MEDIUM,
        ))
    return offers


def _growth_offers(
    scores: CategoryScores,
    signals: dict[str, list[Signal]],
    monetized_loss: int | None,
) -> list[Offer]:
    automation = _find(signals, "systems", "automation")
    tracking = _find(signals, "hypergrowth", "growth_tracking")
    automation_low = _is_weak(automation)
    tracking_low = _is_weak(tracking)

    category_gap = scores.systems < STRONG_CATEGORY or scores.hypergrowth < STRONG_CATEGORY
    if not (category_gap and (automation_low or tracking_low)):
        return []

    offers = []
    if automation_low:
        offers.append(Offer(
            id=FLAGSHIP_OFFER_ID,
            label="24/7 AI Receptionist",
            reason=automation.notes,
            priority=HIGH,
            monetized_loss=monetized_loss,
        ))

    if (automation_low and tracking_low) or scores.systems < WEAK_CATEGORY or scores.hypergrowth < WEAK_CATEGORY:
        weakest = tracking if tracking_low else automation
        offers.append(Offer(
            id="scalability_package",
            label="Scalability & Automation Package",
            reason=weakest.notes,
            priority=MEDIUM,
        ))
    return offers


def generate_offers(
    scores: CategoryScores,
    signals: dict[str, list[Signal]],
    profile: ReputationProfile | None,
    monetized_loss: int | None,
    now: datetime | None = None,
) -> list[Offer]:
    """Run the offer rules in catalog order and keep the first MAX_OFFERS."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    offers = (
        _trust_offers(scores, signals)
        + _reputation_offers(profile, now)
        + _growth_offers(scores, signals, monetized_loss)
    )
    return offers[:MAX_OFFERS]


def order_for_display(offers: list[Offer]) -> list[Offer]:
    """Flagship offer first, then high > medium > low. Stable within a priority."""
    return sorted(offers, key=lambda o: (o.id != FLAGSHIP_OFFER_ID, PRIORITY_RANK.get(o.priority, len(PRIORITY_RANK))))
