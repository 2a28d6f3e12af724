import os
from dotenv import load_dotenv

# Load .env automatically for local/dev usage
load_dotenv()


class Settings:
    def __init__(self) -> None:
        self.flask_env = os.getenv("FLASK_ENV", "production")
        self.secret_key = os.getenv("SECRET_KEY", "dev")

        # Realm is the bare origin; return path is appended to it verbatim
        self.app_base_url = os.getenv("APP_BASE_URL", "http://127.0.0.1:5000").rstrip("/")
        self.steam_return_path = os.getenv("STEAM_RETURN_PATH", "/auth/steam/return")

        self.verify_timeout_seconds = float(os.getenv("STEAM_VERIFY_TIMEOUT_SECONDS", "10"))
        self.nonce_skew_ms = int(os.getenv("STEAM_NONCE_SKEW_MS", "20000"))

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
