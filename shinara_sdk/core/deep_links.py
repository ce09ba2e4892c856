from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

REFERRAL_PARAM_KEY = "shinara_ref_code"


def extract_referral_code_from_url(url: str | None) -> str | None:
    """Returns the referral code carried by a deep link, or None when absent."""
    if not url:
        return None
    try:
        query = urlsplit(url.strip()).query
    except ValueError:
        return None
    values = parse_qs(query, keep_blank_values=True).get(REFERRAL_PARAM_KEY)
    if not values:
        return None
    code = values[0]
    if not code.strip():
        return None
    return code
