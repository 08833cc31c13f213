from cash_report.page_quality import authority_score, page_quality, structure_score


def test_structure_rewards_heading_hierarchy(make_content):
    content = make_content(headings=["Home", "Services", "About", "Contact"], text="a\n\nb\n\nc")
    assert structure_score(content) == 100
    assert structure_score(make_content(text="one block")) == 30


def test_authority_keywords_capped(make_content):
    text = "research study data analysis expert professional certified authority"
    # 8 keywords capped at 30 points, short title, short text
    assert authority_score(make_content(text=text, title="Acme")) == 70


def test_overall_is_weighted(make_content):
    scores = page_quality(make_content(text="Too short.", title="Acme"))
    expected = scores["clarity"] * 0.3 + scores["authority"] * 0.25 + scores["structure"] * 0.25 + scores["headlines"] * 0.2
    assert scores["overall"] == int(expected + 0.5)
    assert all(0 <= v <= 100 for v in scores.values())
