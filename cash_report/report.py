"""HTML template + WeasyPrint PDF for the CASH audit report."""

from html import escape
from pathlib import Path

from .models import AnalysisResult

CATEGORY_LABELS = [
    ("content", "Content"),
    ("authority", "Authority"),
    ("systems", "Systems"),
    ("hypergrowth", "Hypergrowth"),
]


def format_score(score: int) -> str:
    """72 -> '72/100'."""
    return f"{score}/100"


def score_color(score: int) -> str:
    """Text colour band for a 0-100 score."""
    if score >= 80:
        return "#16a34a"
    if score >= 60:
        return "#ca8a04"
    if score >= 40:
        return "#ea580c"
    return "#dc2626"


def _format_money(n: int) -> str:
    """Format dollars with commas: 54000 -> '$54,000'."""
    return f"${n:,}"


def render_report_html(result: AnalysisResult) -> str:
    """Build the report markup. Split out from the PDF step so it can be tested without WeasyPrint."""
    score_result = result.score
    scores = score_result.scores
    business_name = escape(result.content.title)

    category_rows = ""
    for key, label in CATEGORY_LABELS:
        value = getattr(scores, key)
        weakest = next((s for s in score_result.signals[key] if s.score < 5), None)
        note = escape(weakest.notes) if weakest else "No urgent gaps found."
        category_rows += f"""
        <tr>
            <td class="cat-name">{label}</td>
            <td class="cat-score" style="color: {score_color(value)}">{format_score(value)}</td>
            <td class="cat-note">{note}</td>
        </tr>
        """

    issue_items = "".join(
        f'<li class="issue issue-{issue.severity}">{escape(issue.label)}</li>'
        for issue in score_result.priority_issues
    ) or '<li class="issue">No priority issues found.</li>'

    offer_cards = ""
    for offer in score_result.offers:
        loss = ""
        if offer.monetized_loss is not None:
            loss = f'<div class="offer-loss">Estimated loss: {_format_money(offer.monetized_loss)}/month</div>'
        offer_cards += f"""
        <div class="offer">
            <div class="offer-label">{escape(offer.label)}</div>
            <div class="offer-reason">{escape(offer.reason)}</div>
            {loss}
        </div>
        """

    bullets = "".join(f"<li>{escape(b)}</li>" for b in result.ai_summary.short_bullets)
    business_type = escape(score_result.detected_business_type or "Local business")

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
    @page {{
        size: A4;
        margin: 30px;
    }}

    * {{
        margin: 0;
        padding: 0;
        box-sizing: border-box;
    }}

    body {{
        font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
        color: #1a1a2e;
        font-size: 13px;
    }}

    .top-bar {{
        height: 5px;
        background: linear-gradient(90deg, #4ecdc4, #3dbdb5);
        border-radius: 3px 3px 0 0;
    }}

    .header {{
        padding: 32px 32px 0 32px;
    }}

    .prepared-for {{
        font-size: 11px;
        color: #8b95a5;
        letter-spacing: 0.08em;
        text-transform: uppercase;
    }}

    .business-name {{
        font-size: 26px;
        font-weight: 700;
        margin: 4px 0;
    }}

    .overall {{
        font-size: 40px;
        font-weight: 800;
        margin-top: 16px;
    }}

    .section {{
        padding: 24px 32px 0 32px;
    }}

    .section-heading {{
        font-size: 16px;
        font-weight: 700;
        margin-bottom: 10px;
    }}

    table {{
        width: 100%;
        border-collapse: collapse;
    }}

    td {{
        padding: 10px 8px;
        border-bottom: 1px solid #e8eaed;
        vertical-align: top;
    }}

    .cat-name {{ font-weight: 600; width: 110px; }}
    .cat-score {{ font-weight: 700; width: 80px; }}
    .cat-note {{ color: #4a5568; }}

    .issue {{ margin: 0 0 6px 18px; }}
    .issue-high {{ color: #dc2626; }}
    .issue-medium {{ color: #ea580c; }}

    .offer {{
        border: 1px solid #e8eaed;
        border-radius: 10px;
        padding: 14px 16px;
        margin-bottom: 10px;
    }}

    .offer-label {{ font-weight: 700; margin-bottom: 4px; }}
    .offer-reason {{ color: #4a5568; }}
    .offer-loss {{ color: #dc2626; font-weight: 700; margin-top: 6px; }}

    .banner {{
        background: linear-gradient(135deg, #1a1a2e 0%, #2a2a4e 100%);
        border-radius: 12px;
        margin: 24px 32px 0 32px;
        padding: 24px 32px;
        color: white;
    }}

    .banner li {{ margin: 0 0 6px 18px; color: rgba(255,255,255,0.85); }}
    .hook {{ font-size: 15px; font-weight: 700; margin-top: 12px; color: #4ecdc4; }}
</style>
</head>
<body>
    <div class="top-bar"></div>
    <div class="header">
        <div class="prepared-for">Prepared For</div>
        <div class="business-name">{business_name}</div>
        <div class="prepared-for">{business_type} &middot; {escape(result.url)}</div>
        <div class="overall" style="color: {score_color(scores.overall)}">CASH Score {format_score(scores.overall)}</div>
    </div>

    <div class="section">
        <div class="section-heading">Your Scores</div>
        <table>
            {category_rows}
        </table>
    </div>

    <div class="section">
        <div class="section-heading">Fix These First</div>
        <ul>{issue_items}</ul>
    </div>

    <div class="section">
        <div class="section-heading">Recommended Next Steps</div>
        {offer_cards}
    </div>

    <div class="banner">
        <ul>{bullets}</ul>
        <div class="hook">{escape(result.ai_summary.one_line_hook)}</div>
    </div>
</body>
</html>"""


def generate_report_pdf(result: AnalysisResult, output_path: Path) -> Path:
    """
    Render an analysis as a PDF audit report.

    Args:
        result: Completed analysis
        output_path: Where to save the PDF

    Returns:
        Path to the generated PDF
    """
    # WeasyPrint pulls in Pango at import time; only load it when a PDF is requested
    from weasyprint import HTML

    output_path = Path(output_path)
    HTML(string=render_report_html(result)).write_pdf(str(output_path))
    return output_path
