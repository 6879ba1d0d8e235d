"""Main entry point for the FastAPI application."""

import argparse
import os

import uvicorn

from country_accounts.app import configure_fastapi_app
from country_accounts.config import configure_logging, load_config_from_env


def main() -> None:
    """Run the FastAPI application using Uvicorn."""
    parser = argparse.ArgumentParser(
        description="Run the country accounts FastAPI application.",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment configuration file.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "8000")),
        help="Port to run the FastAPI application on.",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to run the FastAPI application on.",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes to run.",
    )
    args = parser.parse_args()

    config = load_config_from_env(args.env_file)
    configure_logging(config)

    if args.reload or args.workers > 1:
        # uvicorn needs an import string to reload or spawn workers
        os.environ["ENV_FILE"] = args.env_file
        uvicorn.run(
            "country_accounts.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=args.workers,
        )
        return

    uvicorn.run(configure_fastapi_app(config), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
