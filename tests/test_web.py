import pytest
from fastapi.testclient import TestClient

from cash_report import web
from cash_report.main import AnalysisError
from cash_report.models import AISummary, AnalysisResult, NOT_FOUND
from cash_report.scoring import score
from cash_report.verification import CodeStore, EmailVerifier


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(web, "verifier", EmailVerifier(CodeStore()))
    return TestClient(web.app)


def test_analyze_rejects_invalid_url(client):
    response = client.post("/api/analyze", json={"url": "not a url"})
    assert response.status_code == 400
    assert "request_id" in response.json()


def test_analyze_returns_result(client, monkeypatch, make_content, now):
    content = make_content(text="We fix things.", title="Handy Helpers")

    async def fake_analyze(url, email=None, request_id=None):
        return AnalysisResult(
            request_id=request_id,
            url="https://handy.example",
            timestamp=now.isoformat(),
            score=score(content, now=now),
            ai_summary=AISummary(short_bullets=["a"], one_line_hook="b"),
            reputation=NOT_FOUND,
            content=content,
        )

    monkeypatch.setattr(web, "analyze_url", fake_analyze)
    response = client.post("/api/analyze", json={"url": "handy.example", "email": ""})

    assert response.status_code == 200
    data = response.json()
    assert data["client_email"] is None
    assert data["score"]["scores"]["systems"] == 0
    assert len(data["score"]["offers"]) <= 4


def test_analyze_failure_shape(client, monkeypatch):
    async def failing(url, email=None, request_id=None):
        raise AnalysisError("no content", request_id)

    monkeypatch.setattr(web, "analyze_url", failing)
    response = client.post("/api/analyze", json={"url": "acme.example"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Analysis failed"
    assert body["message"] == "no content"
    assert body["request_id"]


def test_verify_email_flow(client):
    assert client.post("/api/verify-email", json={}).status_code == 400

    sent = client.post("/api/verify-email", json={"email": "test@example.com"})
    assert sent.json()["success"] is True

    wrong = client.post("/api/verify-email", json={"email": "test@example.com", "code": "000000"})
    assert wrong.status_code == 400

    ok = client.post("/api/verify-email", json={"email": "test@example.com", "code": "123456"})
    assert ok.json() == {"success": True, "message": "Email verified successfully."}


def test_missing_report_is_404(client):
    assert client.get("/reports/missing.pdf").status_code == 404


def test_pdf_failure_still_returns_analysis(client, monkeypatch, make_content, now):
    content = make_content(text="We fix things.", title="Handy Helpers")

    async def fake_analyze(url, email=None, request_id=None):
        return AnalysisResult(
            request_id=request_id,
            url="https://handy.example",
            timestamp=now.isoformat(),
            score=score(content, now=now),
            ai_summary=AISummary(short_bullets=["a"], one_line_hook="b"),
            reputation=NOT_FOUND,
            content=content,
        )

    def broken_pdf(result, output_path):
        raise OSError("cannot load library 'libpango-1.0-0'")

    monkeypatch.setattr(web, "analyze_url", fake_analyze)
    monkeypatch.setattr(web, "generate_report_pdf", broken_pdf)
    response = client.post("/api/analyze", json={"url": "handy.example", "pdf": True})

    assert response.status_code == 200
    data = response.json()
    assert data["request_id"]
    assert data["score"]["scores"]["systems"] == 0
    assert "report_url" not in data


def test_empty_code_issues_a_new_one(client):
    response = client.post("/api/verify-email", json={"email": "test@example.com", "code": ""})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Verification code sent to email."}
