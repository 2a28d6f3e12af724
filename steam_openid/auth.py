from __future__ import annotations

from urllib.parse import urlencode

from steam_openid.errors import InvalidReturnPath


STEAM_OPENID_ENDPOINT = "https://steamcommunity.com/openid/login"
OPENID_NS = "http://specs.openid.net/auth/2.0"
IDENTIFIER_SELECT = "http://specs.openid.net/auth/2.0/identifier_select"


def create_auth_url(realm: str, return_path: str) -> str:
    """Return the URL to redirect the browser to Steam OpenID provider.

    Uses OpenID 2.0 immediate=false flow. ``realm`` is the site origin
    (e.g. ``https://example.com``) and ``return_path`` the callback route,
    which must start with ``/``. Steam sends the user back to
    ``realm + return_path``; the callback validator expects exactly that.
    """
    if not return_path.startswith("/"):
        raise InvalidReturnPath("Return path must start with /")

    params = {
        "openid.mode": "checkid_setup",
        "openid.ns": OPENID_NS,
        "openid.identity": IDENTIFIER_SELECT,
        "openid.claimed_id": IDENTIFIER_SELECT,
        "openid.return_to": realm + return_path,
        "openid.realm": realm,
    }
    return f"{STEAM_OPENID_ENDPOINT}?{urlencode(params)}"
