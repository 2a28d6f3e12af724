from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from steam_openid.verify import VALID_RESPONSE_BODY


REALM = "https://example.com"
RETURN_PATH = "/steam/callback"
STEAM_ID = "76561197960287930"
CLAIMED_ID = f"https://steamcommunity.com/openid/id/{STEAM_ID}"
SIGNED = "signed,op_endpoint,claimed_id,identity,return_to,response_nonce,assoc_handle"


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = VALID_RESPONSE_BODY) -> None:
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse()
        self.exc = exc
        self.calls: List[Dict] = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def nonce_at(when: datetime) -> str:
    return when.strftime("%Y-%m-%dT%H:%M:%SZ") + "p0bTn7Qx3YwWQZv+oP5rLa"
