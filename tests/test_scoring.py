from cash_report.models import HIGH, MEDIUM, NOT_FOUND, ReputationProfile, Signal
from cash_report.scoring import (
    DEFAULT_PER_LEAD_VALUE,
    FIXED_MONTHLY_MISSED_CALLS,
    aggregate,
    blend_authority,
    estimate_monetized_loss,
    normalize,
    overall_score,
    rank_issues,
)


def _signals(*scores):
    return [Signal(id=f"s{i}", label=f"s{i}", score=s, notes=f"note {i}") for i, s in enumerate(scores)]


def test_normalize():
    assert normalize([]) == 0
    assert normalize(_signals(10, 5)) == 75
    assert normalize(_signals(0, 0, 0)) == 0
    assert normalize(_signals(10, 10, 10, 10)) == 100


def test_authority_blend():
    assert blend_authority(60, ReputationProfile(found=True, score=80)) == 70


def test_authority_blend_without_profile():
    assert blend_authority(60, None) == 30
    assert blend_authority(45, None) == 23
    assert blend_authority(45, NOT_FOUND) == 23


def test_overall_is_rounded_mean():
    assert overall_score(70, 45, 30, 0) == 36
    assert overall_score(100, 100, 100, 100) == 100
    assert overall_score(50, 51, 0, 0) == 25


def test_reputation_pass_through_excluded_from_on_page_average(make_signals):
    signals = make_signals(review_recency=5, credentials=5, social_proof=5, trust_badges=5, reputation_profile=10)
    scores = aggregate(signals, ReputationProfile(found=True, score=100))
    # on-page 50, blended with 100
    assert scores.authority == 75


def test_aggregate_category_scores(make_signals):
    signals = make_signals(
        conversion_friction=10, intent_signals=8, value_proposition=6, mobile_experience=4,
        automation=3, growth_tracking=0,
    )
    scores = aggregate(signals, None)
    assert scores.content == 70
    assert scores.systems == 30
    assert scores.hypergrowth == 0
    assert scores.authority == 50
    assert scores.overall == round((70 + 50 + 30 + 0) / 4)


def test_rank_issues_one_per_weak_category(make_scores, make_signals):
    scores = make_scores(content=40, authority=20, systems=80, hypergrowth=10)
    signals = make_signals(
        intent_signals=2, mobile_experience=0,
        review_recency=9, credentials=3, social_proof=1,
        growth_tracking=1,
    )
    issues = rank_issues(scores, signals)

    assert [i.id for i in issues] == ["intent_signals", "credentials", "growth_tracking"]
    assert [i.severity for i in issues] == [MEDIUM, HIGH, HIGH]
    assert issues[1].label == "credentials note"


def test_rank_issues_skips_category_without_weak_signal(make_scores, make_signals):
    scores = make_scores(content=45)
    signals = make_signals(conversion_friction=5, intent_signals=5, value_proposition=5, mobile_experience=5)
    assert rank_issues(scores, signals) == []


def test_rank_issues_boundaries(make_scores, make_signals):
    signals = make_signals(automation=4)
    assert rank_issues(make_scores(systems=50), signals) == []
    issues = rank_issues(make_scores(systems=30), signals)
    assert issues[0].severity == MEDIUM
    issues = rank_issues(make_scores(systems=29), signals)
    assert issues[0].severity == HIGH


def test_monetized_loss_absent_when_no_automation_gap():
    assert estimate_monetized_loss(50, 5, "Dentist") is None
    assert estimate_monetized_loss(90, 9, None) is None


def test_monetized_loss_uses_business_type_table():
    assert estimate_monetized_loss(40, 4, "Dentist") == 90 * 600
    assert estimate_monetized_loss(0, 0, "Law Firm") == 90 * 1500
    assert estimate_monetized_loss(60, 4, "Restaurant") == 90 * 60


def test_monetized_loss_defaults_for_unknown_types():
    expected = FIXED_MONTHLY_MISSED_CALLS * DEFAULT_PER_LEAD_VALUE
    assert estimate_monetized_loss(0, 0, None) == expected
    assert estimate_monetized_loss(0, 0, "unclassified") == expected
    assert estimate_monetized_loss(0, 0, "Spaceport") == expected
