"""Signal calculators for the CASH Method.

Each signal is a declarative rule table: a list of (id, points, predicate)
rules over the page, an optional starting value and floor, and a score
threshold that picks between a positive and an actionable note. The notes are
reused verbatim as priority-issue labels and offer reasons, so changing one
changes customer-facing copy.

Everything here is pattern matching over lowercased text and raw markup.
"""

import math
import re
from dataclasses import dataclass
from typing import Callable

from .models import NOT_FOUND, ReputationProfile, ScrapedContent, Signal

MAX_SIGNAL_SCORE = 10


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int = 0, high: int = MAX_SIGNAL_SCORE) -> int:
    return max(low, min(high, value))


@dataclass(frozen=True)
class Page:
    """Lowercased views of a ScrapedContent, built once per analysis."""

    text: str
    html: str
    word_count: int

    @property
    def everything(self) -> str:
        return f"{self.text} {self.html}"

    @classmethod
    def from_content(cls, content: ScrapedContent) -> "Page":
        text = " ".join([content.text, content.title, *content.headings]).lower()
        return cls(text=text, html=content.html.lower(), word_count=content.word_count)


Predicate = Callable[[Page], bool]


@dataclass(frozen=True)
class Rule:
    id: str
    points: float
    predicate: Predicate


@dataclass(frozen=True)
class SignalRules:
    id: str
    label: str
    rules: list[Rule]
    threshold: int
    positive: str
    negative: str
    base: float = 0.0
    floor: int = 0


def _source(page: Page, where: str) -> str:
    if where == "html":
        return page.html
    if where == "all":
        return page.everything
    return page.text


def contains_any(keywords: list[str], where: str = "text") -> Predicate:
    def predicate(page: Page) -> bool:
        haystack = _source(page, where)
        return any(kw in haystack for kw in keywords)
    return predicate


def lacks_all(keywords: list[str], where: str = "text") -> Predicate:
    has = contains_any(keywords, where)
    return lambda page: not has(page)


def matches(pattern: str, where: str = "text") -> Predicate:
    compiled = re.compile(pattern)
    return lambda page: bool(compiled.search(_source(page, where)))


def any_of(*predicates: Predicate) -> Predicate:
    return lambda page: any(p(page) for p in predicates)


def per_keyword(prefix: str, keywords: list[str], points: float, where: str = "text") -> list[Rule]:
    """One rule per keyword, so the score grows with how many distinct keywords appear."""
    return [Rule(f"{prefix}:{kw}", points, contains_any([kw], where)) for kw in keywords]


def evaluate(signal: SignalRules, page: Page) -> Signal:
    raw = signal.base + sum(rule.points for rule in signal.rules if rule.predicate(page))
    score = clamp(round_half_up(raw), low=signal.floor)
    notes = signal.positive if score >= signal.threshold else signal.negative
    return Signal(id=signal.id, label=signal.label, score=score, notes=notes)


# ---------------------------------------------------------------------------
# Authority
# ---------------------------------------------------------------------------

REVIEW_KEYWORDS = [
    "review", "testimonial", "rating", "stars", "5-star", "five star",
    "google reviews", "yelp",
]
REVIEW_WIDGETS = [
    "trustpilot", "birdeye", "podium", "elfsight", "yotpo", "grade.us",
    "reviews-widget", "google-reviews", "trustindex",
]
RECENCY_KEYWORDS = ["recent review", "latest review", "this week", "yesterday", "last month"]

REVIEW_RECENCY = SignalRules(
    id="review_recency",
    label="Review Recency & Volume",
    rules=[
        *per_keyword("review", REVIEW_KEYWORDS, 1),
        *per_keyword("widget", REVIEW_WIDGETS, 2, where="html"),
        Rule("recency", 2, any_of(
            contains_any(RECENCY_KEYWORDS),
            matches(r"\b\d+\s+(?:day|days|week|weeks)\s+ago\b"),
        )),
    ],
    threshold=7,
    positive="Fresh, visible reviews give new visitors instant proof that you deliver.",
    negative="Your reviews are old or hidden. New customers see this and choose your competitor.",
)

CREDENTIAL_PATTERNS = [
    r"\blicensed\b",
    r"\bcertified\b",
    r"\bboard[- ]certified\b",
    r"\b(?:university|college|school of)\b",
    r"\b\d+\+?\s*years?\s+(?:of\s+)?experience\b",
    r"\b(?:accredited|bonded|insured)\b",
    r"\b(?:dds|dmd|esq|cpa|phd)\b",
    r"\b(?:award[- ]winning|member of the)\b",
]
ABOUT_KEYWORDS = ["about us", "our team", "meet the", "our story", "who we are"]

CREDENTIALS = SignalRules(
    id="credentials",
    label="Credential Verification",
    rules=[
        *[Rule(f"credential:{i}", 1.8, matches(p)) for i, p in enumerate(CREDENTIAL_PATTERNS)],
        Rule("about_section", 1, contains_any(ABOUT_KEYWORDS)),
    ],
    threshold=7,
    positive="Licenses, training and experience are clearly stated.",
    negative="No verifiable credentials on the page. Visitors can't tell why they should trust you over anyone else.",
)

SOCIAL_PLATFORMS = [
    "facebook.com", "instagram.com", "linkedin.com", "twitter.com",
    "x.com/", "youtube.com", "tiktok.com", "yelp.com",
]
TESTIMONIAL_KEYWORDS = [
    "testimonial", "what our clients say", "what our customers say",
    "success stor", "case stud", "client stories", "before and after",
]

SOCIAL_PROOF = SignalRules(
    id="social_proof",
    label="Social Proof Density",
    rules=[
        *per_keyword("platform", SOCIAL_PLATFORMS, 1, where="html"),
        *per_keyword("testimonial", TESTIMONIAL_KEYWORDS, 2),
    ],
    threshold=6,
    positive="Active social profiles and customer stories back up your claims.",
    negative="Little social proof. There are no customer stories or active profiles to show real people use you.",
)

TRUST_KEYWORDS = ["bbb", "better business bureau", "accredited", "award", "featured in", "as seen on", "verified"]
SECURITY_KEYWORDS = ["ssl", "secure", "encrypted", "privacy policy", "hipaa"]
GUARANTEE_KEYWORDS = ["guarantee", "warranty", "money-back", "money back", "satisfaction"]

TRUST_BADGES = SignalRules(
    id="trust_badges",
    label="Trust Badges",
    rules=[
        *per_keyword("trust", TRUST_KEYWORDS, 2, where="all"),
        *per_keyword("security", SECURITY_KEYWORDS, 1, where="all"),
        *per_keyword("guarantee", GUARANTEE_KEYWORDS, 2),
    ],
    threshold=7,
    positive="Badges, security cues and guarantees lower the risk of contacting you.",
    negative="No trust badges, security cues or guarantees. Nothing reduces the risk of picking you.",
)


def reputation_signal(profile: ReputationProfile | None) -> Signal:
    """Display-only view of the external profile; never part of the on-page authority average."""
    profile = profile or NOT_FOUND
    score = clamp(round_half_up(profile.score / 10))
    if not profile.found:
        notes = "No Google Business Profile found. You are invisible in local map searches."
    elif score >= 7:
        notes = "Strong Google Business Profile with healthy rating, volume and recency."
    else:
        notes = "Your Google Business Profile is weak. Low rating, few or stale reviews are costing you calls."
    return Signal(id="reputation_profile", label="Reputation Profile", score=score, notes=notes)


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------

def _long_form(page: Page) -> bool:
    fields = page.html.count("<input") + page.html.count("<select") + page.html.count("<textarea")
    return fields > 6 or page.html.count(" required") >= 5


MULTI_STEP_KEYWORDS = ["step 1", "step 2", "multi-step", "next step", "continue to step", "page 1 of"]
PRICING_KEYWORDS = ["$", "price", "pricing", "cost", "quote", "free estimate", "rates"]
CTA_KEYWORDS = [
    "call now", "call us", "book now", "book online", "schedule", "get started",
    "contact us", "get a quote", "request", "sign up", "buy now",
]

CONVERSION_FRICTION = SignalRules(
    id="conversion_friction",
    label="Conversion Friction",
    rules=[
        Rule("long_form", -3, _long_form),
        Rule("multi_step", -2, contains_any(MULTI_STEP_KEYWORDS)),
        Rule("no_pricing", -2, lacks_all(PRICING_KEYWORDS)),
        Rule("no_cta", -3, lacks_all(CTA_KEYWORDS)),
    ],
    base=10,
    floor=1,
    threshold=7,
    positive="Clear next step with little friction between a visitor and a booked job.",
    negative="Too much friction. Long forms, no pricing cues or no clear call to action make visitors leave.",
)

INTENT_FAMILIES = {
    "urgency": ["today", "now", "limited", "hurry", "same-day", "same day", "emergency", "24/7"],
    "value": ["free", "save", "discount", "affordable", "special offer", "deal"],
    "social": ["reviews", "trusted by", "customers", "clients", "rated", "testimonials"],
    "action": ["call us", "book", "schedule", "get started", "contact us", "sign up"],
}

INTENT_SIGNALS = SignalRules(
    id="intent_signals",
    label="Intent Signal Strength",
    rules=[Rule(family, 2.5, contains_any(keywords)) for family, keywords in INTENT_FAMILIES.items()],
    threshold=7,
    positive="Copy speaks to urgency, value, proof and action.",
    negative="Copy is passive. It gives visitors no reason to act today.",
)

UNIQUENESS_KEYWORDS = ["only", "unique", "exclusive", "unlike", "different", "ultimate", "first", "leading", "#1", "award-winning"]
BENEFIT_KEYWORDS = ["save", "faster", "guaranteed", "results", "peace of mind", "stress-free", "easy", "grow", "protect"]
COMPARISON_KEYWORDS = ["compared to", " vs ", "versus", "better than", "instead of"]
SPECIFICITY_PATTERN = r"\$\s?\d|\b\d+(?:\.\d+)?\s*(?:%|percent|years?|customers|clients|projects|reviews|minutes|hours|days)\b"

VALUE_PROPOSITION = SignalRules(
    id="value_proposition",
    label="Value Proposition Clarity",
    rules=[
        Rule("uniqueness", 3, contains_any(UNIQUENESS_KEYWORDS)),
        Rule("benefits", 3, contains_any(BENEFIT_KEYWORDS)),
        Rule("specificity", 2, matches(SPECIFICITY_PATTERN)),
        Rule("comparison", 2, contains_any(COMPARISON_KEYWORDS)),
    ],
    threshold=7,
    positive="It's clear what you do, who it's for and why you're the better choice.",
    negative="Unclear value proposition. Visitors can't tell why you beat the next result on Google.",
)

RESPONSIVE_MARKERS = ['name="viewport"', "width=device-width", "@media"]
TOUCH_KEYWORDS = ["tel:", "tap to call", "click to call", "tap", "swipe", "mobile-friendly"]
SLOW_KEYWORDS = ["slow", "loading...", "please wait", "taking forever"]

MOBILE_EXPERIENCE = SignalRules(
    id="mobile_experience",
    label="Mobile Experience",
    rules=[
        Rule("responsive", 4, contains_any(RESPONSIVE_MARKERS, where="html")),
        Rule("touch", 2, contains_any(TOUCH_KEYWORDS, where="all")),
        Rule("no_slow_complaints", 2, lacks_all(SLOW_KEYWORDS)),
        Rule("body_length", 2, lambda page: 300 <= page.word_count <= 3000),
    ],
    threshold=7,
    positive="Page is built for phones, where most local searches happen.",
    negative="Weak mobile experience. Most local searches happen on phones and this page fights them.",
)


# ---------------------------------------------------------------------------
# Systems & Hypergrowth
# ---------------------------------------------------------------------------

BOOKING_MARKERS = [
    "calendly", "acuityscheduling", "booksy", "zocdoc", "opentable", "housecallpro",
    "servicetitan", "setmore", "book online", "schedule online", "book now", "book an appointment",
]
ALWAYS_ON_MARKERS = [
    "chatbot", "live chat", "intercom", "drift.com", "tidio", "24/7", "ai assistant",
    "virtual receptionist", "answering service",
]
CRM_MARKERS = ["hubspot", "salesforce", "zoho", "client portal", "patient portal", "customer portal", "my account"]
EMAIL_LIST_MARKERS = ["newsletter", "subscribe", "mailchimp", "klaviyo", "constant contact"]
PAYMENT_MARKERS = ["stripe", "paypal", "squareup", "pay online", "pay your bill", "checkout"]

AUTOMATION = SignalRules(
    id="automation",
    label="Automation Infrastructure",
    rules=[
        Rule("booking", 3, contains_any(BOOKING_MARKERS, where="all")),
        Rule("always_on", 3, contains_any(ALWAYS_ON_MARKERS, where="all")),
        Rule("crm", 2, contains_any(CRM_MARKERS, where="all")),
        Rule("email_list", 1, contains_any(EMAIL_LIST_MARKERS, where="all")),
        Rule("payments", 1, contains_any(PAYMENT_MARKERS, where="all")),
    ],
    threshold=7,
    positive="Online booking and always-on follow-up capture leads while you work.",
    negative="You are manually following up with leads. After-hours calls and form fills go unanswered and slip away.",
)

ANALYTICS_MARKERS = ["google-analytics", "googletagmanager", "gtag(", "analytics.js", "plausible", "mixpanel", "segment.com"]
PIXEL_MARKERS = ["fbq(", "connect.facebook.net", "googleadservices", "ads/ga-audiences", "snap.licdn", "analytics.tiktok"]
CONVERSION_MARKERS = ["conversion", "thank-you", "thank you for", "gtag_report_conversion", "lead form", "goal"]
HEATMAP_MARKERS = ["hotjar", "clarity.ms", "fullstory", "crazyegg", "mouseflow", "heatmap"]
ATTRIBUTION_MARKERS = ["utm_", "gclid", "fbclid", "attribution", "?ref="]

GROWTH_TRACKING = SignalRules(
    id="growth_tracking",
    label="Growth Attribution Tracking",
    rules=[
        Rule("analytics", 3, contains_any(ANALYTICS_MARKERS, where="all")),
        Rule("ad_pixels", 2, contains_any(PIXEL_MARKERS, where="all")),
        Rule("conversions", 2, contains_any(CONVERSION_MARKERS, where="all")),
        Rule("heatmaps", 2, contains_any(HEATMAP_MARKERS, where="all")),
        Rule("attribution", 1, contains_any(ATTRIBUTION_MARKERS, where="all")),
    ],
    threshold=7,
    positive="Analytics, pixels and conversion goals show which marketing pays.",
    negative="No growth tracking. You can't tell which marketing dollars bring in customers.",
)


CONTENT_SIGNALS = [CONVERSION_FRICTION, INTENT_SIGNALS, VALUE_PROPOSITION, MOBILE_EXPERIENCE]
AUTHORITY_SIGNALS = [REVIEW_RECENCY, CREDENTIALS, SOCIAL_PROOF, TRUST_BADGES]
SYSTEMS_SIGNALS = [AUTOMATION]
HYPERGROWTH_SIGNALS = [GROWTH_TRACKING]

SIGNAL_RULES = {
    rules.id: rules
    for rules in CONTENT_SIGNALS + AUTHORITY_SIGNALS + SYSTEMS_SIGNALS + HYPERGROWTH_SIGNALS
}


def calculate(signal_id: str, content: ScrapedContent) -> Signal:
    """Score a single on-page signal by id."""
    return evaluate(SIGNAL_RULES[signal_id], Page.from_content(content))


def calculate_signals(content: ScrapedContent, profile: ReputationProfile | None = None) -> dict[str, list[Signal]]:
    """All signals grouped by category, in emission order. Reputation comes last in authority."""
    page = Page.from_content(content)
    return {
        "content": [evaluate(s, page) for s in CONTENT_SIGNALS],
        "authority": [evaluate(s, page) for s in AUTHORITY_SIGNALS] + [reputation_signal(profile)],
        "systems": [evaluate(s, page) for s in SYSTEMS_SIGNALS],
        "hypergrowth": [evaluate(s, page) for s in HYPERGROWTH_SIGNALS],
    }
