from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, redirect, request

from steam_openid.auth import create_auth_url
from steam_openid.callback import verify_callback_url
from steam_openid.config import settings
from steam_openid.errors import SteamOpenIdError
from steam_openid.verify import RemoteAssertionChecker


def create_app(checker: Optional[RemoteAssertionChecker] = None) -> Flask:
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.secret_key
    app.config['STEAM_CHECKER'] = checker or RemoteAssertionChecker()

    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    # --- Steam SSO (OpenID 2.0) ---
    @app.get("/auth/steam/login")
    def auth_steam_login():
        return redirect(create_auth_url(settings.app_base_url, settings.steam_return_path))

    @app.get(settings.steam_return_path)
    def auth_steam_return():
        # Rebuild from the raw query bytes; request.args has already collapsed duplicates
        callback_url = request.base_url
        if request.query_string:
            callback_url += "?" + request.query_string.decode("latin-1")
        try:
            steamid = verify_callback_url(
                callback_url,
                settings.app_base_url,
                settings.steam_return_path,
                settings.nonce_skew_ms,
                checker=app.config['STEAM_CHECKER'],
            )
        except SteamOpenIdError as ex:
            return jsonify({"error": ex.kind.value}), 401
        return jsonify({"steamid": steamid})

    return app
