"""Validation of the callback Steam sends back after login.

Everything up to the remote ``check_authentication`` call is a pure check on
the callback URL text. The order matters: the exactly-once field check runs on
the raw query string before anything looks at the parsed mapping, because
parsing collapses repeated keys and would hide a smuggled second value.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple, Union
from urllib.parse import SplitResult, parse_qsl, urlunsplit

from steam_openid.auth import OPENID_NS, STEAM_OPENID_ENDPOINT
from steam_openid.errors import (
    ClaimedIdIdentityMismatch,
    DuplicateRequiredField,
    InvalidAssocHandle,
    InvalidCharacters,
    InvalidClaimedIdFormat,
    InvalidEndpoint,
    InvalidMode,
    InvalidNamespace,
    InvalidNonceFormat,
    InvalidSignedCharacters,
    NonceOutOfSkew,
    NonceParseFailure,
    ReturnPathMismatch,
    ReturnToMismatch,
    SteamOpenIdError,
    UnexpectedField,
    UnexpectedSignedField,
)
from steam_openid.verify import RemoteAssertionChecker


log = logging.getLogger(__name__)

REQUIRED_SEARCH_FIELDS: Tuple[str, ...] = (
    "openid.ns",
    "openid.mode",
    "openid.op_endpoint",
    "openid.claimed_id",
    "openid.identity",
    "openid.return_to",
    "openid.response_nonce",
    "openid.assoc_handle",
    "openid.signed",
    "openid.sig",
)
REQUIRED_SIGNED_FIELDS = frozenset({
    "signed",
    "op_endpoint",
    "claimed_id",
    "identity",
    "return_to",
    "response_nonce",
    "assoc_handle",
})

# Steam's classic deployment always hands out this association handle
STEAM_ASSOC_HANDLE = "1234567890"
DEFAULT_ALLOWED_SKEW_MS = 20000
NONCE_TIMESTAMP_LENGTH = 20

# re.ASCII: \d and case folding must not reach outside ASCII
_CLAIMED_ID_RE = re.compile(r"https://steamcommunity\.com/openid/id/(765\d{14})", re.ASCII)
_ALLOWED_QUERY_RE = re.compile(r"\?(%3A|%2F|%3F|%3D|%2C|%2B|[a-z0-9]|[.\-_=&])+", re.ASCII | re.IGNORECASE)
_ALLOWED_SIGNED_RE = re.compile(r"[a-z,_]+", re.ASCII | re.IGNORECASE)

CallbackUrl = Union[str, SplitResult]


@dataclass(frozen=True)
class OpenIdAssertion:
    ns: str
    mode: str
    op_endpoint: str
    claimed_id: str
    identity: str
    return_to: str
    response_nonce: str
    assoc_handle: str
    signed: Tuple[str, ...]
    sig: str

    @classmethod
    def from_params(cls, params: Dict[str, str]) -> "OpenIdAssertion":
        return cls(
            ns=params["openid.ns"],
            mode=params["openid.mode"],
            op_endpoint=params["openid.op_endpoint"],
            claimed_id=params["openid.claimed_id"],
            identity=params["openid.identity"],
            return_to=params["openid.return_to"],
            response_nonce=params["openid.response_nonce"],
            assoc_handle=params["openid.assoc_handle"],
            signed=tuple(params["openid.signed"].split(",")),
            sig=params["openid.sig"],
        )


def _split_callback_url(response_url: CallbackUrl, return_to: str) -> str:
    """Return the raw query string, once the URL is bound to ``return_to``."""
    url = urlunsplit(response_url) if isinstance(response_url, SplitResult) else str(response_url)
    url = url.partition("#")[0]
    base, sep, query = url.partition("?")
    if not sep or base != return_to:
        raise ReturnPathMismatch("Return path is not equal to callback path")
    return query


def _check_fields(query: str) -> Dict[str, str]:
    if not _ALLOWED_QUERY_RE.fullmatch("?" + query):
        raise InvalidCharacters("Callback URL contains invalid characters")

    # Raw-string count, see module docstring
    for field in REQUIRED_SEARCH_FIELDS:
        seen = query.count(f"{field}=")
        if seen > 1:
            raise DuplicateRequiredField(f"Callback URL contains {field} more than once")
        if seen == 0:
            raise UnexpectedField(f"Callback URL is missing {field}")

    pairs = parse_qsl(query, keep_blank_values=True)
    # A bare "openid.sig" has no "=" but would still override the real value
    keys = [key for key, _ in pairs]
    for field in REQUIRED_SEARCH_FIELDS:
        if keys.count(field) > 1:
            raise DuplicateRequiredField(f"Callback URL contains {field} more than once")

    params = dict(pairs)
    if set(params) != set(REQUIRED_SEARCH_FIELDS) or len(params) != len(REQUIRED_SEARCH_FIELDS):
        raise UnexpectedField("Callback URL contains other fields than required")
    return params


def _check_signed(signed: str) -> None:
    if not _ALLOWED_SIGNED_RE.fullmatch(signed):
        raise InvalidSignedCharacters("Signed list contains invalid characters")
    fields = signed.split(",")
    if not all(f in REQUIRED_SIGNED_FIELDS for f in fields) or len(fields) != len(REQUIRED_SIGNED_FIELDS):
        raise UnexpectedSignedField("Signed list contains other fields than required")
    # A repeat standing in for a required name would leave that name unsigned
    if len(set(fields)) != len(fields):
        raise UnexpectedSignedField("Signed list repeats a field")


def _check_fixed_values(assertion: OpenIdAssertion, return_to: str) -> None:
    if assertion.ns != OPENID_NS:
        raise InvalidNamespace("Namespace is not valid")
    if assertion.mode != "id_res":
        raise InvalidMode("Mode is not id_res")
    if assertion.op_endpoint != STEAM_OPENID_ENDPOINT:
        raise InvalidEndpoint("OpenID Provider endpoint is bad")
    if assertion.claimed_id != assertion.identity:
        raise ClaimedIdIdentityMismatch("Claimed ID is not equal to identity")
    if assertion.return_to != return_to:
        raise ReturnToMismatch("Return path is not equal to base domain")
    if assertion.assoc_handle != STEAM_ASSOC_HANDLE:
        raise InvalidAssocHandle(f"Assoc handle is not {STEAM_ASSOC_HANDLE}")


def parse_nonce_time(nonce: str) -> datetime:
    """Read the timestamp that prefixes an OpenID response nonce.

    Steam nonces look like ``2024-05-01T12:00:00Z`` followed by a random
    suffix. A missing UTC offset is taken as UTC.
    """
    if not isinstance(nonce, str) or len(nonce) < NONCE_TIMESTAMP_LENGTH:
        raise InvalidNonceFormat("Incorrect response_nonce format")
    stamp = nonce[:NONCE_TIMESTAMP_LENGTH]
    if stamp.endswith(("Z", "z")):
        stamp = stamp[:-1] + "+00:00"
    try:
        when = datetime.fromisoformat(stamp)
    except ValueError as ex:
        raise NonceParseFailure("Failed to parse timestamp in response_nonce") from ex
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def check_response_nonce(nonce: str, allowed_skew_ms: int = DEFAULT_ALLOWED_SKEW_MS, now: Optional[datetime] = None) -> None:
    when = parse_nonce_time(nonce)
    now = now or datetime.now(timezone.utc)
    skew_ms = abs((now - when).total_seconds()) * 1000
    if skew_ms > allowed_skew_ms:
        raise NonceOutOfSkew("response_nonce timestamp is outside allowed range")


def extract_steam_id(claimed_id: str) -> str:
    m = _CLAIMED_ID_RE.fullmatch(claimed_id)
    if not m:
        raise InvalidClaimedIdFormat("Claimed ID is not valid")
    return m.group(1)


class CallbackValidator:
    """Validates one application's Steam callbacks.

    ``realm`` and ``return_path`` must be the same values that were passed to
    :func:`steam_openid.auth.create_auth_url`. The instance keeps no per-call
    state, so one validator can serve concurrent requests.
    """

    def __init__(
        self,
        realm: str,
        return_path: str,
        allowed_skew_ms: int = DEFAULT_ALLOWED_SKEW_MS,
        checker: Optional[RemoteAssertionChecker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.return_to = realm + return_path
        self.allowed_skew_ms = allowed_skew_ms
        self.checker = checker or RemoteAssertionChecker()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def check_local(self, response_url: CallbackUrl) -> Tuple[Dict[str, str], str]:
        """Run every check that needs no network.

        Returns the parsed callback parameters (to be re-posted to Steam) and
        the SteamID64 they claim.
        """
        query = _split_callback_url(response_url, self.return_to)
        params = _check_fields(query)
        _check_signed(params["openid.signed"])
        assertion = OpenIdAssertion.from_params(params)
        _check_fixed_values(assertion, self.return_to)
        check_response_nonce(assertion.response_nonce, self.allowed_skew_ms, now=self.clock())
        return params, extract_steam_id(assertion.claimed_id)

    def validate(self, response_url: CallbackUrl) -> str:
        try:
            params, steam_id = self.check_local(response_url)
            self.checker.verify(params)
        except SteamOpenIdError as ex:
            log.warning("Steam callback rejected (%s)", ex.kind.value)
            raise
        log.info("Steam callback verified for %s", steam_id)
        return steam_id

    async def avalidate(self, response_url: CallbackUrl) -> str:
        try:
            params, steam_id = self.check_local(response_url)
            await self.checker.averify(params)
        except SteamOpenIdError as ex:
            log.warning("Steam callback rejected (%s)", ex.kind.value)
            raise
        log.info("Steam callback verified for %s", steam_id)
        return steam_id


def verify_callback_url(
    response_url: CallbackUrl,
    realm: str,
    return_path: str,
    allowed_skew_ms: int = DEFAULT_ALLOWED_SKEW_MS,
    *,
    checker: Optional[RemoteAssertionChecker] = None,
) -> str:
    """Blocking variant of :func:`validate_callback_url` for WSGI handlers."""
    return CallbackValidator(realm, return_path, allowed_skew_ms, checker=checker).validate(response_url)


async def validate_callback_url(
    response_url: CallbackUrl,
    realm: str,
    return_path: str,
    allowed_skew_ms: int = DEFAULT_ALLOWED_SKEW_MS,
    *,
    checker: Optional[RemoteAssertionChecker] = None,
) -> str:
    """Verify the Steam OpenID callback URL and return the SteamID64.

    Raises a :class:`steam_openid.errors.SteamOpenIdError` subclass on any
    failure; the caller must then treat the user as not authenticated.

    Example::

        steam_id = await validate_callback_url(url, "https://example.com", "/steam/callback")
    """
    return await CallbackValidator(realm, return_path, allowed_skew_ms, checker=checker).avalidate(response_url)
