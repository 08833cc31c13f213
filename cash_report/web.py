"""FastAPI app: CASH analysis, email verification and PDF downloads."""

import asyncio
import logging
import os
import re
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, field_validator

from .main import AnalysisError, InvalidURLError, analyze_url, new_request_id
from .report import generate_report_pdf
from .verification import EmailVerifier, VerificationError

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="CASH Website Audit")

REPORTS_DIR = Path(os.getenv("REPORTS_DIR", "reports"))
REPORTS_DIR.mkdir(exist_ok=True)

verifier = EmailVerifier()


class AnalyzeRequest(BaseModel):
    url: str
    email: str | None = None
    pdf: bool = False

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value: object) -> str | None:
        text = str(value or "").strip()
        return text or None


class VerifyEmailRequest(BaseModel):
    email: str = ""
    code: str | None = None


@app.post("/api/analyze")
async def analyze(body: AnalyzeRequest):
    request_id = new_request_id()
    logger.info("Analysis request received [%s] url=%s", request_id, body.url)

    try:
        result = await analyze_url(body.url, email=body.email, request_id=request_id)
    except InvalidURLError as e:
        logger.warning("Invalid input [%s]: %s", request_id, e.message)
        return JSONResponse({"error": e.message, "request_id": request_id}, status_code=400)
    except AnalysisError as e:
        logger.error("Analysis failed [%s]: %s", request_id, e.message)
        return _failed(e.message, request_id)
    except Exception as e:
        logger.exception("Analysis crashed [%s]", request_id)
        return _failed(str(e) or type(e).__name__, request_id)

    payload = result.to_dict()
    if body.pdf:
        slug = re.sub(r"[^a-z0-9]+", "", result.content.title.lower())[:40] or "site"
        filename = f"{slug}_{request_id[:8]}_cash_report.pdf"
        try:
            await asyncio.to_thread(generate_report_pdf, result, REPORTS_DIR / filename)
        except Exception:
            # The analysis already succeeded; return it without a report link
            logger.exception("PDF generation failed [%s]", request_id)
        else:
            payload["report_url"] = f"/reports/{filename}"
    return payload


@app.post("/api/verify-email")
async def verify_email(body: VerifyEmailRequest):
    if not body.email:
        return JSONResponse({"success": False, "error": "Email is required"}, status_code=400)

    try:
        if not body.code:
            code = verifier.issue(body.email)
            # Delivery is stubbed: the code goes to the server log
            logger.info("Verification code %s issued for %s", code, body.email)
            return {"success": True, "message": "Verification code sent to email."}

        verifier.verify(body.email, body.code)
    except VerificationError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)

    return {"success": True, "message": "Email verified successfully."}


@app.get("/reports/{filename}")
async def download_report(filename: str):
    path = REPORTS_DIR / Path(filename).name
    if not path.exists():
        return JSONResponse({"error": "Report not found."}, status_code=404)
    return FileResponse(path, filename=path.name, media_type="application/pdf")


def _failed(message: str, request_id: str) -> JSONResponse:
    return JSONResponse(
        {"error": "Analysis failed", "message": message, "request_id": request_id},
        status_code=500,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
