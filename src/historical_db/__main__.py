"""Entry point: python -m historical_db"""

import argparse

from dotenv import load_dotenv


def main():
    load_dotenv()

    from config.config import load_config
    from core.logging.setup import setup_logging

    config = load_config()

    parser = argparse.ArgumentParser(description="Historical DB API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=config.port,
        help=f"Bind port (default: PORT or {config.port})",
    )
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    logger = setup_logging(level=config.log_level, json_format=config.log_json)
    logger.info("Historical DB API listening on port %s", args.port)

    import uvicorn

    uvicorn.run(
        "historical_db.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
