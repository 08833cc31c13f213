"""Lead delivery: POST each finished analysis to the lead-sheet webhook."""

import logging
import os

import httpx
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


async def send_lead(
    payload: dict,
    request_id: str = "",
    client: httpx.AsyncClient | None = None,
) -> bool:
    """
    Send the serialized analysis to LEAD_WEBHOOK_URL.

    Fire-and-forget from the caller's point of view: failures are logged and
    reported as False, never raised, so the analysis response is unaffected.
    """
    webhook_url = os.getenv("LEAD_WEBHOOK_URL")
    if not webhook_url:
        logger.warning("LEAD_WEBHOOK_URL not set; lead not logged [%s]", request_id)
        return False

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=15.0)
    try:
        response = await client.post(webhook_url, json=payload)
    except httpx.HTTPError as e:
        logger.error("Lead webhook request failed [%s]: %s", request_id, e)
        return False
    finally:
        if owns_client:
            await client.aclose()

    if response.is_success:
        logger.info("Lead data sent to webhook [%s]", request_id)
        return True

    logger.error(
        "Lead webhook rejected payload [%s]: %s %s",
        request_id, response.status_code, response.text[:200],
    )
    return False
