from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from shinara_sdk.client import AttributionClient, create_client
from shinara_sdk.core.config import get_settings
from shinara_sdk.core.logging import configure_logging
from shinara_sdk.errors import ShinaraSDKError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shinara-sdk",
        description="Referral attribution client for the Shinara SDK gateway.",
    )
    parser.add_argument("--api-key", help="overrides SHINARA_API_KEY")
    parser.add_argument("--store-url", help="overrides SHINARA_STORE_URL")
    parser.add_argument("--pretty-logs", action="store_true", help="human readable log lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="validate the key, report setup, fire app-open")
    subparsers.add_parser("validate-key", help="validate the configured API key")

    validate_code = subparsers.add_parser("validate-code", help="validate and store a referral code")
    validate_code.add_argument("code")

    deep_link = subparsers.add_parser("deep-link", help="handle a deep link carrying a referral code")
    deep_link.add_argument("url")

    register = subparsers.add_parser("register", help="register the converted user")
    register.add_argument("user_id")
    register.add_argument("--email")
    register.add_argument("--name")
    register.add_argument("--phone")

    purchase = subparsers.add_parser("purchase", help="attribute an in-app purchase")
    purchase.add_argument("product_id")
    purchase.add_argument("transaction_id")
    purchase.add_argument("token")

    subparsers.add_parser("state", help="print the persisted attribution state")
    return parser


async def _state_snapshot(client: AttributionClient) -> dict[str, object]:
    store = client.store
    return {
        "setup_completed": await store.is_setup_completed(),
        "referral_code": await store.get_referral_code(),
        "program_id": await store.get_program_id(),
        "referral_code_id": await store.get_referral_code_id(),
        "external_user_id": await store.get_user_id(),
        "auto_generated_external_user_id": await store.get_anonymous_user_id(),
        "registered_users": await store.list_registered_users(),
        "processed_transactions": await store.list_processed_transactions(),
    }


async def _run(args: argparse.Namespace) -> dict[str, object]:
    settings = get_settings()
    updates: dict[str, object] = {}
    if args.api_key:
        updates["api_key"] = args.api_key
    if args.store_url:
        updates["store_url"] = args.store_url
    if updates:
        settings = settings.model_copy(update=updates)

    async with await create_client(settings) as client:
        if args.command == "init":
            validation = await client.initialize(client.api_key or "")
            await client.drain()
            return {"app_id": validation.app_id, "track_retention": validation.track_retention}
        if args.command == "validate-key":
            validation = await client.validate_api_key()
            return {"app_id": validation.app_id, "track_retention": validation.track_retention}
        if args.command == "validate-code":
            return {"program_id": await client.validate_referral_code(args.code)}
        if args.command == "deep-link":
            task = await client.handle_deep_link(args.url)
            await client.drain()
            return {"submitted": task is not None, "referral_code": await client.get_referral_code()}
        if args.command == "register":
            registered = await client.register_user(
                args.user_id,
                email=args.email,
                name=args.name,
                phone=args.phone,
            )
            return {"registered": registered, "user_id": await client.get_user_id()}
        if args.command == "purchase":
            attributed = await client.attribute_purchase(
                args.product_id,
                args.transaction_id,
                args.token,
            )
            return {"attributed": attributed}
        return await _state_snapshot(client)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(get_settings().log_level, json_logs=not args.pretty_logs)
    try:
        result = asyncio.run(_run(args))
    except (ShinaraSDKError, ValueError) as exc:
        print(json.dumps({"error": type(exc).__name__, "message": str(exc)}), file=sys.stderr)
        return 1
    print(json.dumps(result, sort_keys=True))
    return 0
