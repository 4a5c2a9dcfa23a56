"""End-to-end tests against the ASGI app."""

from datetime import UTC, datetime, timedelta

from src.core.enums import ContentType
from src.modules.moderation.constants import REASON_HARASSMENT, REASON_PROFANITY, REASON_SPAM
from src.modules.moderation.repository import ModerationLogRepository
from src.modules.moderation.router import get_moderation_service
from src.modules.moderation.services import ExternalCategories, ModerationService
from src.modules.reports.repository import ReportRepository

MODERATE = "/api/v1/moderate"
REPORTS = "/api/v1/reports"


def _report_body(content_id: str = "42", **overrides) -> dict:
    body = {"contentId": content_id, "contentType": "creature", "reason": "spam"}
    body.update(overrides)
    return body


async def _report_as(client, session_id: str, content_id: str = "42"):
    return await client.post(REPORTS, json=_report_body(content_id), headers={"X-Session-ID": session_id})


async def test_moderate_approves_clean_text(client):
    response = await client.post(MODERATE, json={"text": "오늘 본 귀신 이야기", "type": "creature"})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"isApproved", "confidence", "reasons", "filteredText", "moderationId"}
    assert body["isApproved"] is True
    assert body["reasons"] == []
    assert body["filteredText"] == "오늘 본 귀신 이야기"


async def test_moderate_rejects_and_masks_profanity(client):
    response = await client.post(MODERATE, json={"text": "이 개새끼 뭐야", "type": "comment"})

    body = response.json()
    assert response.status_code == 200
    assert body["isApproved"] is False
    assert body["reasons"] == [REASON_PROFANITY]
    assert "개새끼" not in body["filteredText"]


async def test_moderate_requires_text_and_type(client):
    missing_type = await client.post(MODERATE, json={"text": "hello"})
    missing_text = await client.post(MODERATE, json={"type": "comment"})
    empty_text = await client.post(MODERATE, json={"text": "", "type": "comment"})

    for response in (missing_type, missing_text, empty_text):
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["type"] == "ValidationError"


async def test_moderate_rejects_unknown_type(client):
    response = await client.post(MODERATE, json={"text": "hello", "type": "poem"})
    assert response.status_code == 400


async def test_moderation_stats_cover_the_last_day(app, client, session):
    await client.post(MODERATE, json={"text": "좋은 이야기", "type": "comment"})
    await client.post(MODERATE, json={"text": "씨발 www.spam.com", "type": "comment"})
    await client.post(MODERATE, json={"text": "www.spam.com", "type": "general"})
    await app.state.log_writer.drain()

    await ModerationLogRepository(session).log_moderation_check(
        moderation_id="mod_old",
        content_text="old",
        content_type=ContentType.COMMENT,
        is_approved=False,
        confidence=0.9,
        reasons=[REASON_PROFANITY],
        created_at=datetime.now(UTC) - timedelta(hours=48),
    )

    response = await client.get("/api/v1/moderation/stats")

    assert response.status_code == 200
    stats = response.json()
    assert stats["totalChecked"] == 3
    assert stats["approved"] == 1
    assert stats["rejected"] == 2
    assert stats["approvalRate"] == 33.3
    assert stats["topReasons"] == [[REASON_SPAM, 2], [REASON_PROFANITY, 1]]


async def test_moderation_stats_empty(client):
    stats = (await client.get("/api/v1/moderation/stats")).json()
    assert stats["totalChecked"] == 0
    assert stats["approvalRate"] == 0.0
    assert stats["topReasons"] == []


async def test_report_is_accepted(client):
    response = await _report_as(client, "reader-1")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["reportId"]
    assert body["message"] == "Your report has been received. We will review it shortly."
    assert body["contentStatus"] == "approved"


async def test_report_requires_fields(client):
    response = await client.post(REPORTS, json={"contentId": "42", "reason": "spam"})
    assert response.status_code == 400
    assert "contentType" in response.json()["error"]


async def test_general_content_cannot_be_reported(client):
    response = await client.post(REPORTS, json=_report_body(contentType="general"))
    assert response.status_code == 400


async def test_duplicate_report_returns_409(client):
    assert (await _report_as(client, "reader-1")).status_code == 201

    response = await _report_as(client, "reader-1")

    assert response.status_code == 409
    assert response.json()["error"] == "You have already reported this content."


async def test_reporter_falls_back_to_body_session_then_ip(client):
    first = await client.post(REPORTS, json=_report_body(reporterSession="body-session"))
    second = await client.post(REPORTS, json=_report_body())
    third = await client.post(REPORTS, json=_report_body())

    assert first.status_code == 201
    assert second.status_code == 201
    assert third.status_code == 409


async def test_reports_escalate_to_hidden_then_blocked(client):
    statuses = [(await _report_as(client, f"reader-{i}")).json()["contentStatus"] for i in range(1, 6)]
    assert statuses == ["approved", "approved", "hidden", "hidden", "blocked"]


async def test_report_stats_and_recent(client):
    await _report_as(client, "reader-1", content_id="1")
    await _report_as(client, "reader-2", content_id="1")
    await client.post(
        REPORTS,
        json=_report_body("7", contentType="comment", reason="harassment", description="  rude  "),
        headers={"X-Session-ID": "reader-3"},
    )

    stats = (await client.get(f"{REPORTS}/stats")).json()
    assert stats == {
        "total": 3,
        "pending": 3,
        "resolved": 0,
        "byReason": {"spam": 2, "harassment": 1},
        "byType": {"creature": 2, "comment": 1},
    }

    recent = (await client.get(f"{REPORTS}/recent", params={"limit": 2})).json()
    assert len(recent) == 2
    assert recent[0]["contentId"] == "7"
    assert recent[0]["description"] == "rude"
    assert "reporterKey" not in recent[0]


async def test_recent_limit_is_bounded(client):
    response = await client.get(f"{REPORTS}/recent", params={"limit": 0})
    assert response.status_code == 400


async def test_report_rate_limit(client):
    responses = [
        await _report_as(client, "busy-reader", content_id=str(content_id)) for content_id in range(11)
    ]
    assert [r.status_code for r in responses[:10]] == [201] * 10
    assert responses[10].status_code == 429
    assert responses[10].headers["Retry-After"] == "60"


async def test_liveness(client):
    response = await client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_readiness_with_sqlite(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["ready"] is True


async def test_security_headers_and_request_id(client):
    response = await client.get("/api/v1/health/live", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


async def test_full_health_check_reports_database(client):
    response = await client.get("/api/v1/health/")
    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert set(body["services"]) == {"database"}


class _FlaggingClassifier:
    timeout = 1.0

    async def classify(self, text: str) -> ExternalCategories:
        return ExternalCategories(harassment=True)


async def test_external_flags_reach_the_response(app, client):
    app.dependency_overrides[get_moderation_service] = lambda: ModerationService(
        external_classifier=_FlaggingClassifier()
    )

    response = await client.post(MODERATE, json={"text": "너 내일 학교에서 보자", "type": "comment"})

    body = response.json()
    assert body["isApproved"] is False
    assert body["reasons"] == [REASON_HARASSMENT]
    assert body["confidence"] == 0.8


async def test_moderation_stats_survive_an_unreachable_database(client, monkeypatch):
    async def unreachable(self, since):
        raise ConnectionRefusedError(111, "Connect call failed")

    monkeypatch.setattr(ModerationLogRepository, "get_stats", unreachable)

    response = await client.get("/api/v1/moderation/stats")

    assert response.status_code == 200
    stats = response.json()
    assert stats["totalChecked"] == 0
    assert stats["topReasons"] == []
    assert stats["note"]


async def test_report_answers_503_when_the_database_is_unreachable(client, monkeypatch):
    async def unreachable(self, report):
        raise ConnectionRefusedError(111, "Connect call failed")

    monkeypatch.setattr(ReportRepository, "add_pending_and_count", unreachable)

    response = await _report_as(client, "reader-1")

    assert response.status_code == 503
    assert response.json()["type"] == "StorageError"
    assert "try again" in response.json()["error"]
