# src/onepiece_api/web_interface/run_api.py
import argparse
import logging

import uvicorn

from onepiece_api.config.app_config import AppConfig
from onepiece_api.config.logging_config import LoggingConfig
from onepiece_api.services.auth_service import hash_password

logger = logging.getLogger(__name__)


def run_api(argv=None):
    """Run the FastAPI application, or print a password hash with ``--hash-password``."""
    parser = argparse.ArgumentParser(prog="onepiece-api", description="Run the One Piece API")
    parser.add_argument("--host", help="Bind address (default API_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port (default API_PORT or 3000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.add_argument("--hash-password", metavar="PASSWORD",
                        help="Print the hash to store in API_ADMIN_PASSWORD_HASH and exit")
    args = parser.parse_args(argv)

    if args.hash_password:
        print(hash_password(args.hash_password))
        return

    LoggingConfig().configure()
    app_config = AppConfig()
    host = args.host or app_config.host
    port = args.port or app_config.port

    logger.info(f"Starting One Piece API on {host}:{port}")

    uvicorn.run(
        "onepiece_api.web_interface.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload
    )


if __name__ == "__main__":
    run_api()
