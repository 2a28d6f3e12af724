import logging
import os
import sys

from steam_openid.config import settings
from steam_openid.main import create_app


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    host = "127.0.0.1"
    port = int(os.environ.get("PORT", "5000"))
    app = create_app()
    app.run(host=host, port=port, debug=settings.flask_env == "development")


if __name__ == "__main__":
    main()
