from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

import requests

from steam_openid.auth import STEAM_OPENID_ENDPOINT
from steam_openid.config import settings
from steam_openid.errors import NetworkError, RemoteVerificationFailed


log = logging.getLogger(__name__)

VALID_RESPONSE_BODY = "ns:http://specs.openid.net/auth/2.0\nis_valid:true\n"


class RemoteAssertionChecker:
    """Asks Steam whether a positive assertion really came from it.

    Posts the callback parameters back with ``openid.mode=check_authentication``.
    Nothing is cached and nothing is retried: nonces and signatures are
    single-use on Steam's side.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        endpoint: str = STEAM_OPENID_ENDPOINT,
        timeout: Optional[float] = None,
    ) -> None:
        self.session = session
        self.endpoint = endpoint
        self.timeout = settings.verify_timeout_seconds if timeout is None else timeout

    def verify(self, params: Mapping[str, str]) -> None:
        data = dict(params)
        data["openid.mode"] = "check_authentication"
        post = self.session.post if self.session is not None else requests.post
        try:
            r = post(
                self.endpoint,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as ex:
            log.warning("check_authentication request failed: %s", ex.__class__.__name__)
            raise NetworkError(f"Network error: {ex.__class__.__name__}") from ex

        if not 200 <= r.status_code < 300:
            log.warning("check_authentication answered HTTP %s", r.status_code)
            raise NetworkError(f"Network error: {r.status_code}", status_code=r.status_code)

        if r.text != VALID_RESPONSE_BODY:
            raise RemoteVerificationFailed("Steam verification failed")

    async def averify(self, params: Mapping[str, str]) -> None:
        # requests is blocking; keep the event loop free while Steam answers
        await asyncio.to_thread(self.verify, params)
