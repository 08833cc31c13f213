"""Value objects for a single site analysis. Nothing here is shared across requests."""

from dataclasses import asdict, dataclass, field
from datetime import datetime


UNCLASSIFIED = "unclassified"

BUSINESS_TYPES = (
    "Property Management",
    "Dentist",
    "Law Firm",
    "Med Spa",
    "Chiropractor",
    "Veterinarian",
    "HVAC",
    "Plumber",
    "Roofing",
    "Auto Repair",
    "Real Estate",
    "Insurance Agency",
    "Restaurant",
    "Salon",
    "Fitness",
)

HIGH = "high"
MEDIUM = "medium"
LOW = "low"
PRIORITY_RANK = {HIGH: 0, MEDIUM: 1, LOW: 2}


@dataclass(frozen=True)
class ScrapedContent:
    title: str
    headings: tuple[str, ...] = ()
    text: str = ""
    html: str = ""
    url: str = ""

    @property
    def lowered(self) -> str:
        """Page text and title, lowercased. The haystack most rules search."""
        return f"{self.text} {self.title}".lower()

    @property
    def word_count(self) -> int:
        return len(self.text.split())


@dataclass(frozen=True)
class ReputationProfile:
    found: bool = False
    score: int = 0
    rating: float | None = None
    review_count: int | None = None
    last_review_date: datetime | None = None
    response_rate: float | None = None
    name: str | None = None
    url: str | None = None
    method: str = "NOT_FOUND"  # DIRECT_LINK, API_SEARCH or NOT_FOUND


NOT_FOUND = ReputationProfile()


@dataclass(frozen=True)
class Signal:
    id: str
    label: str
    score: int  # 0-10
    notes: str


@dataclass(frozen=True)
class CategoryScores:
    overall: int
    content: int
    authority: int
    systems: int
    hypergrowth: int


@dataclass(frozen=True)
class PriorityIssue:
    id: str
    label: str
    severity: str


@dataclass(frozen=True)
class Offer:
    id: str
    label: str
    reason: str
    priority: str
    monetized_loss: int | None = None


@dataclass(frozen=True)
class ScoreResult:
    scores: CategoryScores
    signals: dict[str, list[Signal]]
    priority_issues: list[PriorityIssue] = field(default_factory=list)
    offers: list[Offer] = field(default_factory=list)
    detected_business_type: str | None = None

    def find_offer(self, offer_id: str) -> Offer | None:
        return next((o for o in self.offers if o.id == offer_id), None)


@dataclass(frozen=True)
class AISummary:
    short_bullets: list[str]
    one_line_hook: str


@dataclass
class AnalysisResult:
    request_id: str
    url: str
    timestamp: str
    score: ScoreResult
    ai_summary: AISummary
    reputation: ReputationProfile
    content: ScrapedContent
    page_quality: dict[str, int] = field(default_factory=dict)
    client_email: str | None = None

    def to_dict(self) -> dict:
        """JSON-ready form used by the API response and the lead webhook."""
        data = asdict(self)
        last_review = data["reputation"]["last_review_date"]
        if last_review is not None:
            data["reputation"]["last_review_date"] = last_review.isoformat()
        data["content"]["headings"] = list(data["content"]["headings"])
        # Raw markup is only needed for scoring
        data["content"].pop("html", None)
        return data
