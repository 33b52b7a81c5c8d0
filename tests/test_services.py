from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.schemas.chatflow import is_chatflow_schema, is_generated
from app.services import chatflows as chatflow_service
from app.services.audit import log_api_action
from app.services.generation import GenerationError, normalize_generated_schema
from app.utils.ids import random_slug
from app.utils.timeutils import format_short_datetime
from conftest import VALID_SCHEMA


def test_random_slug_shape():
    for _ in range(50):
        slug = random_slug()
        assert len(slug) == 8
        assert slug.isalnum() and slug == slug.lower()


@pytest.mark.asyncio
async def test_unique_share_url_retries_until_unused(session_factory, seed, add_chatflow, monkeypatch):
    await add_chatflow(id="cf-1", share_url="taken001")
    candidates = iter(["taken001", "taken001", "free0001"])
    monkeypatch.setattr(chatflow_service, "random_slug", lambda length: next(candidates))

    async with session_factory() as session:
        assert await chatflow_service.unique_share_url(session) == "free0001"


def test_is_chatflow_schema():
    assert is_chatflow_schema(VALID_SCHEMA)
    assert is_chatflow_schema({"fields": []})
    assert not is_chatflow_schema({})
    assert not is_chatflow_schema(None)
    assert not is_chatflow_schema({"fields": [{"id": "1", "type": "radio", "label": "X", "name": "x", "required": True}]})
    # "true" no es booleano
    assert not is_chatflow_schema({"fields": [{"id": "1", "type": "text", "label": "X", "name": "x", "required": "true"}]})
    # las claves opcionales no se validan
    assert is_chatflow_schema({
        "fields": [{"id": "1", "type": "select", "label": "X", "name": "x", "required": True, "options": [1]}],
        "settings": {"theme": "blue"},
    })


def test_is_generated_requires_fields():
    assert not is_generated({})
    assert not is_generated({"fields": []})
    assert is_generated(VALID_SCHEMA)


def test_normalize_generated_schema_fills_ids_and_name():
    out = normalize_generated_schema({
        "name": "  Webinar signup ",
        "fields": [
            {"type": "email", "label": "Email", "name": "email", "required": True, "helperText": "work email"},
        ],
        "settings": {"submitButtonText": "Send"},
    })
    assert out["name"] == "Webinar signup"
    field = out["fields"][0]
    assert field["id"]
    assert field["helperText"] == "work email"
    assert "placeholder" not in field
    assert out["settings"] == {"submitButtonText": "Send"}


@pytest.mark.parametrize("raw", [
    [],
    {"name": "x"},
    {"fields": []},
    {"fields": [{"type": "radio", "label": "X", "name": "x", "required": True}]},
])
def test_normalize_generated_schema_rejects_bad_output(raw):
    with pytest.raises(GenerationError):
        normalize_generated_schema(raw)


@pytest.mark.asyncio
async def test_audit_failure_does_not_propagate():
    session = MagicMock()
    session.commit = AsyncMock(side_effect=RuntimeError("db down"))
    session.rollback = AsyncMock()

    await log_api_action(session, "user-1", "CREATE", "chatflows", "cf-1", {"new": {"name": "x"}})

    session.add.assert_called_once()
    session.rollback.assert_awaited_once()


def test_format_short_datetime():
    assert format_short_datetime(datetime(2026, 10, 18, 14, 5)) == "Oct 18, 02:05 PM"
    assert format_short_datetime(datetime(2026, 3, 2, 9, 30)) == "Mar 2, 09:30 AM"


def test_format_short_datetime_keeps_stored_utc_time():
    # sin conversión a la zona del servidor
    assert format_short_datetime(datetime(2026, 10, 18, 23, 45, tzinfo=timezone.utc)) == "Oct 18, 11:45 PM"
