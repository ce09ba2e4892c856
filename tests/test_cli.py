from __future__ import annotations

import json

from shinara_sdk import cli
from shinara_sdk.store.backend import InMemoryStateBackend
from tests.attribution_fakes import FakeAttributionService, make_client


def _patch_client(monkeypatch, service: FakeAttributionService, backend: InMemoryStateBackend):
    captured: dict[str, object] = {}

    async def _fake_create_client(settings):
        captured["settings"] = settings
        return make_client(service, backend=backend, api_key=settings.api_key)

    monkeypatch.setattr(cli, "create_client", _fake_create_client)
    return captured


def test_cli_validate_code_then_state(monkeypatch, capsys) -> None:
    service = FakeAttributionService()
    backend = InMemoryStateBackend()
    _patch_client(monkeypatch, service, backend)

    assert cli.main(["--api-key", "cli_key", "validate-code", "ABC123"]) == 0
    assert json.loads(capsys.readouterr().out) == {"program_id": "program-1"}

    assert cli.main(["--api-key", "cli_key", "state"]) == 0
    state = json.loads(capsys.readouterr().out)
    assert state["referral_code"] == "ABC123"
    assert state["referral_code_id"] == "code-id-1"
    assert state["setup_completed"] is False
    assert service.calls[0].api_key == "cli_key"


def test_cli_register_without_referral_reports_error(monkeypatch, capsys) -> None:
    service = FakeAttributionService()
    _patch_client(monkeypatch, service, InMemoryStateBackend())

    assert cli.main(["--api-key", "cli_key", "register", "u1"]) == 1

    error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert error["error"] == "NoReferralCodeError"
    assert service.calls == []


def test_cli_deep_link_stores_code(monkeypatch, capsys) -> None:
    service = FakeAttributionService()
    _patch_client(monkeypatch, service, InMemoryStateBackend())

    assert cli.main(["--api-key", "cli_key", "deep-link", "myapp://open?shinara_ref_code=XYZ"]) == 0

    assert json.loads(capsys.readouterr().out) == {"referral_code": "XYZ", "submitted": True}


def test_cli_store_url_override_reaches_settings(monkeypatch, capsys) -> None:
    service = FakeAttributionService()
    captured = _patch_client(monkeypatch, service, InMemoryStateBackend())

    assert cli.main(["--store-url", "sqlite+aiosqlite:///other.db", "purchase", "p1", "tx-1", "t"]) == 0

    assert captured["settings"].store_url == "sqlite+aiosqlite:///other.db"
    assert json.loads(capsys.readouterr().out) == {"attributed": False}
