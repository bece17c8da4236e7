"""Cloud Archive entry point.

Examples:
  cloudarchive                         Start the web app on 127.0.0.1:8000
  cloudarchive --host 0.0.0.0 -p 9000  Listen on all interfaces, port 9000
  cloudarchive --dev                   Start with auto-reload (dev mode)
"""

import argparse
import logging

from cloudarchive import __version__
from cloudarchive.config import get_settings
from cloudarchive.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="cloudarchive",
        description="Cloud Archive - browse Google Cloud Storage buckets in the browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1],
    )
    parser.add_argument("--host", default=settings.host, help="Host to bind")
    parser.add_argument("--port", "-p", type=int, default=settings.port, help="Port to bind")
    parser.add_argument("--dev", action="store_true", help="Auto-reload on code changes")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Console log level",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.dev else args.log_level)

    settings = get_settings()
    if not settings.allow_list():
        logger.warning("ALLOWED_USERS is empty: nobody will be able to sign in")
    if not settings.google_service_account:
        logger.warning("GOOGLE_SERVICE_ACCOUNT is not set: bucket listing will fail")

    from cloudarchive.dashboard import run_dashboard

    try:
        run_dashboard(host=args.host, port=args.port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
