from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict
from urllib.parse import urlencode

import pytest

from steam_openid.auth import OPENID_NS, STEAM_OPENID_ENDPOINT
from tests.helpers import CLAIMED_ID, REALM, RETURN_PATH, SIGNED, nonce_at


@pytest.fixture
def callback_params() -> Callable[..., Dict[str, str]]:
    """Factory for a well-formed positive assertion; keyword args override fields."""

    def _make(**overrides: str) -> Dict[str, str]:
        params = {
            "openid.ns": OPENID_NS,
            "openid.mode": "id_res",
            "openid.op_endpoint": STEAM_OPENID_ENDPOINT,
            "openid.claimed_id": CLAIMED_ID,
            "openid.identity": CLAIMED_ID,
            "openid.return_to": REALM + RETURN_PATH,
            "openid.response_nonce": nonce_at(datetime.now(timezone.utc)),
            "openid.assoc_handle": "1234567890",
            "openid.signed": SIGNED,
            "openid.sig": "W0u5DRbtHE1GG0ZKXjerUZDUGmc=",
        }
        for key, value in overrides.items():
            params["openid." + key] = value
        return params

    return _make


@pytest.fixture
def callback_url(callback_params) -> Callable[..., str]:
    def _make(**overrides: str) -> str:
        return f"{REALM}{RETURN_PATH}?{urlencode(callback_params(**overrides))}"

    return _make
