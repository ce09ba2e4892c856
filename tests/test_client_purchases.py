from __future__ import annotations

import asyncio

import pytest

from shinara_sdk.errors import AttributionError, TransportError
from shinara_sdk.store.backend import InMemoryStateBackend
from tests.attribution_fakes import FakeAttributionService, make_client, seed_referral


async def _client_with_referral(service: FakeAttributionService, **kwargs):
    backend = InMemoryStateBackend()
    await seed_referral(backend, **kwargs)
    return make_client(service, backend=backend)


@pytest.mark.asyncio
async def test_attribute_purchase_without_referral_code_is_silent_noop() -> None:
    service = FakeAttributionService()
    client = make_client(service)

    assert await client.attribute_purchase("coins_100", "tx-1", "token-1") is False
    assert service.calls == []
    assert await client.store.is_transaction_processed("tx-1") is False


@pytest.mark.asyncio
async def test_attribute_purchase_without_api_key_is_silent_noop() -> None:
    service = FakeAttributionService()
    backend = InMemoryStateBackend()
    await seed_referral(backend)
    client = make_client(service, backend=backend, api_key=None)

    assert await client.attribute_purchase("coins_100", "tx-1", "token-1") is False
    assert service.calls == []


@pytest.mark.asyncio
async def test_attribute_purchase_posts_request_and_marks_transaction() -> None:
    service = FakeAttributionService()
    client = await _client_with_referral(service)

    assert await client.attribute_purchase("coins_100", "tx-1", "token-1") is True

    anonymous_id = await client.get_anonymous_user_id()
    assert anonymous_id is not None
    assert service.calls_to("/iappurchase")[0].json == {
        "product_id": "coins_100",
        "transaction_id": "tx-1",
        "code": "ABC123",
        "platform": "python",
        "token": "token-1",
        "affiliate_code_id": "code-id-1",
        "auto_generated_external_user_id": anonymous_id,
    }
    assert await client.store.list_processed_transactions() == ["tx-1"]


@pytest.mark.asyncio
async def test_attribute_purchase_twice_with_same_transaction_issues_one_request() -> None:
    service = FakeAttributionService()
    client = await _client_with_referral(service)

    assert await client.attribute_purchase("coins_100", "tx-1", "token-1") is True
    assert await client.attribute_purchase("coins_100", "tx-1", "token-1") is False

    assert len(service.calls_to("/iappurchase")) == 1
    assert await client.store.list_processed_transactions() == ["tx-1"]


@pytest.mark.asyncio
async def test_concurrent_attribute_purchase_same_transaction_issues_one_request() -> None:
    service = FakeAttributionService()
    gate = asyncio.Event()
    service.gates["/iappurchase"] = gate
    client = await _client_with_referral(service)

    pending = [
        asyncio.create_task(client.attribute_purchase("coins_100", "tx-1", "token-1"))
        for _ in range(4)
    ]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*pending)

    assert results.count(True) == 1
    assert len(service.calls_to("/iappurchase")) == 1


@pytest.mark.asyncio
async def test_concurrent_attribute_purchase_different_transactions_all_recorded() -> None:
    service = FakeAttributionService()
    client = await _client_with_referral(service)

    await asyncio.gather(
        *[client.attribute_purchase("coins_100", f"tx-{i}", "token") for i in range(6)]
    )

    assert len(service.calls_to("/iappurchase")) == 6
    assert sorted(await client.store.list_processed_transactions()) == sorted(
        f"tx-{i}" for i in range(6)
    )


@pytest.mark.asyncio
async def test_attribute_purchase_reuses_setup_anonymous_id() -> None:
    service = FakeAttributionService()
    client = await _client_with_referral(service)
    await client.initialize("test_api_key")
    setup_session_id = service.calls_to("/sdknewtrackingsession")[0].json["session_id"]

    await client.attribute_purchase("coins_100", "tx-1", "token-1")
    await client.attribute_purchase("coins_100", "tx-2", "token-2")

    sent_ids = {
        call.json["auto_generated_external_user_id"] for call in service.calls_to("/iappurchase")
    }
    assert sent_ids == {setup_session_id}


@pytest.mark.asyncio
async def test_attribute_purchase_rejected_allows_caller_retry() -> None:
    service = FakeAttributionService()
    service.statuses["/iappurchase"] = [502]
    client = await _client_with_referral(service)

    with pytest.raises(AttributionError):
        await client.attribute_purchase("coins_100", "tx-1", "token-1")
    assert await client.store.is_transaction_processed("tx-1") is False

    assert await client.attribute_purchase("coins_100", "tx-1", "token-1") is True
    assert len(service.calls_to("/iappurchase")) == 2


@pytest.mark.asyncio
async def test_attribute_purchase_transport_error_surfaces() -> None:
    service = FakeAttributionService()
    service.transport_failures["/iappurchase"] = 1
    client = await _client_with_referral(service)

    with pytest.raises(TransportError):
        await client.attribute_purchase("coins_100", "tx-1", "token-1")
    assert await client.store.is_transaction_processed("tx-1") is False


@pytest.mark.asyncio
async def test_attribute_purchase_omits_missing_code_id() -> None:
    service = FakeAttributionService()
    client = await _client_with_referral(service, code_id=None)

    await client.attribute_purchase("coins_100", "tx-1", "token-1")

    assert "affiliate_code_id" not in service.calls_to("/iappurchase")[0].json


class _YieldingCreateBackend(InMemoryStateBackend):
    """Suspends inside the anonymous-id create step until released."""

    def __init__(self) -> None:
        super().__init__()
        self.create_started = asyncio.Event()
        self.release_create = asyncio.Event()

    async def get_or_create_value(self, key, value, *, unless_present=None):
        self.create_started.set()
        await self.release_create.wait()
        return await super().get_or_create_value(key, value, unless_present=unless_present)


@pytest.mark.asyncio
async def test_purchase_racing_registration_does_not_recreate_anonymous_id() -> None:
    service = FakeAttributionService()
    backend = _YieldingCreateBackend()
    await seed_referral(backend)
    client = make_client(service, backend=backend)

    purchase = asyncio.create_task(client.attribute_purchase("coins_100", "tx-1", "token-1"))
    await backend.create_started.wait()
    assert await client.register_user("u1") is True
    backend.release_create.set()

    assert await purchase is True
    assert await client.get_anonymous_user_id() is None
    assert await client.get_user_id() == "u1"
    body = service.calls_to("/iappurchase")[0].json
    assert body["external_user_id"] == "u1"
    assert "auto_generated_external_user_id" not in body


@pytest.mark.asyncio
async def test_setup_racing_registration_reports_confirmed_user_as_session() -> None:
    service = FakeAttributionService()
    backend = _YieldingCreateBackend()
    client = make_client(service, backend=backend)

    setup = asyncio.create_task(client.trigger_setup())
    await backend.create_started.wait()
    await client.store.confirm_user("u1")
    backend.release_create.set()

    assert await setup is True
    assert await client.get_anonymous_user_id() is None
    assert service.calls_to("/sdknewtrackingsession")[0].json["session_id"] == "u1"
