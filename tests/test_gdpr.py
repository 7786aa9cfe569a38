from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select

from conftest import PLAIN_USER, RECRUITER
from recruit import models
from recruit.pipelines.gdpr import DELETION_MESSAGE, delete_user_data, export_user_data

USER_ID = PLAIN_USER["X-User-Id"]


def _seed_user(seed):
    now = models.utcnow()
    seed(
        models.User(id=USER_ID, email="pat@example.com", name="Pat", role=models.Role.USER),
        models.AuditLog(
            user_id=USER_ID,
            action="CANDIDATE_SEARCH",
            details={"query": "React"},
            created_at=now - timedelta(days=2),
        ),
        models.AuditLog(user_id="someone-else", action="CANDIDATE_SEARCH", created_at=now),
    )


def _audit_rows(run_with_session):
    async def load(session):
        result = await session.execute(select(models.AuditLog).order_by(models.AuditLog.id))
        return result.scalars().all()

    return run_with_session(load)


def test_export_includes_own_request_newest_first(run_with_session, seed):
    _seed_user(seed)

    data = run_with_session(lambda s: export_user_data(s, USER_ID))

    assert data["userData"] == {
        "id": USER_ID,
        "email": "pat@example.com",
        "name": "Pat",
        "role": "USER",
        "image": None,
        "emailVerified": None,
    }
    actions = [log["action"] for log in data["auditLogs"]]
    assert actions == ["USER_DATA_EXPORT_REQUEST", "CANDIDATE_SEARCH"]
    assert data["auditLogs"][1]["details"] == {"query": "React"}
    assert data["auditLogs"][0]["entity"] == "User"
    assert data["auditLogs"][0]["entityId"] == USER_ID


def test_export_unknown_user(run_with_session):
    assert run_with_session(lambda s: export_user_data(s, "nobody")) is None
    assert _audit_rows(run_with_session) == []


def test_delete_anonymizes_audit_trail(run_with_session, seed):
    _seed_user(seed)

    result = run_with_session(lambda s: delete_user_data(s, USER_ID))

    assert result == {"message": DELETION_MESSAGE, "userId": USER_ID}
    rows = _audit_rows(run_with_session)
    assert len(rows) == 3
    assert all(row.user_id != USER_ID for row in rows)
    assert rows[-1].action == "USER_DATA_DELETION_REQUEST"
    assert rows[-1].entity_id == USER_ID

    async def load_user(session):
        return await session.get(models.User, USER_ID)

    assert run_with_session(load_user) is None


def test_delete_unknown_user(run_with_session):
    assert run_with_session(lambda s: delete_user_data(s, "nobody")) is None


def test_export_endpoint(client, seed):
    _seed_user(seed)

    response = client.get("/gdpr/export", headers=PLAIN_USER)

    assert response.status_code == 200
    assert response.headers["Content-Disposition"] == (
        f'attachment; filename="user_data_export_{USER_ID}.json"'
    )
    body = response.json()
    assert body["userData"]["email"] == "pat@example.com"
    assert len(body["auditLogs"]) == 2


def test_export_endpoint_errors(client):
    assert client.get("/gdpr/export").status_code == 401

    response = client.get("/gdpr/export", headers=RECRUITER)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found."


def test_export_endpoint_is_rate_limited(client):
    for _ in range(3):
        assert client.get("/gdpr/export", headers=RECRUITER).status_code == 404

    response = client.get("/gdpr/export", headers=RECRUITER)
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "300"


def test_delete_endpoint(client, seed):
    _seed_user(seed)

    response = client.post("/gdpr/delete", headers=PLAIN_USER)
    assert response.status_code == 200
    assert response.json() == {"message": DELETION_MESSAGE, "userId": USER_ID}

    response = client.post("/gdpr/delete", headers=PLAIN_USER)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found or already deleted."

    response = client.post("/gdpr/delete", headers=PLAIN_USER)
    assert response.status_code == 429
