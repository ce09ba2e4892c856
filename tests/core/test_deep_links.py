from __future__ import annotations

import pytest

from shinara_sdk.core.deep_links import REFERRAL_PARAM_KEY, extract_referral_code_from_url


@pytest.mark.parametrize(
    "url,expected",
    [
        ("myapp://open?shinara_ref_code=ABC123", "ABC123"),
        ("https://example.com/landing?utm_source=x&shinara_ref_code=ZZ9", "ZZ9"),
        ("myapp://open?shinara_ref_code=%20SPACED%20", " SPACED "),
        ("myapp://open?shinara_ref_code=FIRST&shinara_ref_code=SECOND", "FIRST"),
    ],
)
def test_extract_referral_code_from_url_reads_query_param(url: str, expected: str) -> None:
    assert extract_referral_code_from_url(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "myapp://open",
        "myapp://open?other=1",
        "myapp://open?shinara_ref_code=",
        "myapp://open?shinara_ref_code=%20%20",
        "http://[::1",
    ],
)
def test_extract_referral_code_from_url_returns_none_without_code(url: str | None) -> None:
    assert extract_referral_code_from_url(url) is None


def test_referral_param_key_matches_deep_link_contract() -> None:
    assert REFERRAL_PARAM_KEY == "shinara_ref_code"
