"""Outreach summary via Haiku, with a deterministic score-derived fallback."""

import json
import logging
import os
import re

import anthropic
from dotenv import load_dotenv

from .models import AISummary, ScoreResult, ScrapedContent
from .offers import FLAGSHIP_OFFER_ID

load_dotenv()

logger = logging.getLogger(__name__)

SUMMARY_MODEL = os.getenv("CASH_SUMMARY_MODEL", "claude-haiku-4-5-20251001")

SYSTEM_PROMPT = (
    "You are an expert agency advisor writing cold outreach for a local business owner. "
    "You are given their website's CASH scores (Content, Authority, Systems, Hypergrowth), "
    "the weakest signals found on the site, and the offers we recommend.\n\n"
    "Respond with JSON only, no other text.\n\n"
    "Format:\n"
    "{\n"
    '  "shortBullets": ["...", "...", "..."],\n'
    '  "oneLineHook": "..."\n'
    "}\n\n"
    "SHORT_BULLETS: exactly 3 plain-English bullets, each under 20 words, each naming one "
    "concrete problem and what it costs the owner. No jargon, no scores out of 10.\n\n"
    "ONE_LINE_HOOK: one sentence that creates urgency. If a monthly missed-call loss is given, "
    "quote it exactly as a dollar figure."
)


def _format_loss(score_result: ScoreResult) -> str | None:
    flagship = score_result.find_offer(FLAGSHIP_OFFER_ID)
    if flagship is None or flagship.monetized_loss is None:
        return None
    return f"${flagship.monetized_loss:,}"


def fallback_summary(score_result: ScoreResult) -> AISummary:
    """Bullets and hook built only from the scores. Used whenever generation fails or comes back incomplete."""
    bullets = [issue.label for issue in score_result.priority_issues[:2]]
    if not bullets:
        bullets = ["Your site covers the basics, but competitors are automating faster than you."]
    bullets.append(f"Overall CASH score: {score_result.scores.overall}/100.")

    loss = _format_loss(score_result)
    if loss:
        hook = f"Stop losing money! Fix the major trust barriers and the {loss}/month call leak today."
    else:
        hook = "Stop losing money! Fix the major trust barriers before your competitors take your calls."
    return AISummary(short_bullets=bullets, one_line_hook=hook)


def _build_prompt(content: ScrapedContent, score_result: ScoreResult) -> str:
    scores = score_result.scores
    parts = [
        f"Website: {content.url}",
        f"Title: {content.title}",
        f"Business type: {score_result.detected_business_type or 'unknown'}",
        (
            f"Scores: overall {scores.overall}, content {scores.content}, authority {scores.authority}, "
            f"systems {scores.systems}, hypergrowth {scores.hypergrowth} (all out of 100)"
        ),
    ]
    if score_result.priority_issues:
        parts.append("Weakest signals:")
        parts.extend(f"- {issue.label}" for issue in score_result.priority_issues)
    if score_result.offers:
        parts.append("Recommended offers:")
        parts.extend(f"- {offer.label}: {offer.reason}" for offer in score_result.offers)
    loss = _format_loss(score_result)
    if loss:
        parts.append(f"Estimated monthly missed-call loss: {loss}")
    parts.append(f"Page excerpt:\n{content.text[:1500]}")
    return "\n".join(parts)


def generate_summary(
    content: ScrapedContent,
    score_result: ScoreResult,
    request_id: str = "",
) -> AISummary:
    """
    Summarize a scored site into outreach bullets and a hook.

    Never raises: a missing key, API error or malformed reply all return
    fallback_summary(score_result).
    """
    fallback = fallback_summary(score_result)

    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        logger.warning("ANTHROPIC_API_KEY not set; using fallback summary [%s]", request_id)
        return fallback

    try:
        client = anthropic.Anthropic(api_key=api_key)
        response = client.messages.create(
            model=SUMMARY_MODEL,
            max_tokens=300,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": _build_prompt(content, score_result)}],
        )
        text = response.content[0].text.strip()

        json_match = re.search(r"\{.*\}", text, re.DOTALL)
        if json_match:
            text = json_match.group()
        parsed = json.loads(text)
    except (anthropic.APIError, IndexError, AttributeError, ValueError) as e:
        logger.error("AI summary generation failed, using fallback [%s]: %s", request_id, e)
        return fallback

    bullets = parsed.get("shortBullets") if isinstance(parsed, dict) else None
    hook = parsed.get("oneLineHook") if isinstance(parsed, dict) else None
    if not isinstance(bullets, list) or not bullets:
        bullets = fallback.short_bullets
    return AISummary(
        short_bullets=[str(b) for b in bullets],
        one_line_hook=hook if isinstance(hook, str) and hook else fallback.one_line_hook,
    )
