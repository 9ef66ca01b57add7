"""Audit trail tests: one JSONL line per non-health request, no bodies."""

import json
from pathlib import Path

from src.middleware.audit import AuditEntry, create_audit_entry

ROOT = "/apigateway"


def _entries(settings) -> list[dict]:
    path = Path(settings.AUDIT_LOG_PATH)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestAuditEntry:
    def test_to_json_is_single_line(self):
        entry = AuditEntry(method="GET", path="/x", status_code=200)
        assert "\n" not in entry.to_json()
        assert json.loads(entry.to_json())["method"] == "GET"

    def test_factory_sets_outcome_and_timestamp(self):
        entry = create_audit_entry(
            request_id="r",
            method="POST",
            path="/apigateway/createUser",
            source_ip="127.0.0.1",
            request_bytes=10,
            status_code=503,
            latency_ms=1.5,
        )
        assert entry.status == "error"
        assert entry.timestamp


class TestAuditMiddleware:
    async def test_writes_entry_per_request(self, client, settings, user_backend):
        user_backend.respond(200, json={"id": 1})

        await client.get(f"{ROOT}/users/1", headers={"X-Request-ID": "audit-1"})

        entries = _entries(settings)
        assert len(entries) == 1
        assert entries[0]["request_id"] == "audit-1"
        assert entries[0]["method"] == "GET"
        assert entries[0]["path"] == f"{ROOT}/users/1"
        assert entries[0]["status_code"] == 200

    async def test_health_not_audited(self, client, settings):
        await client.get("/health")
        assert _entries(settings) == []

    async def test_body_never_written(self, client, settings, user_backend):
        user_backend.respond(201)

        await client.post(f"{ROOT}/createUser", json={"email": "secret@example.com"})

        raw = Path(settings.AUDIT_LOG_PATH).read_text()
        assert "secret@example.com" not in raw
        assert _entries(settings)[0]["request_bytes"] > 0
