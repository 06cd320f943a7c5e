"""
CLI entry point for the problem details filter.

Usage:
    # Validate a plugin configuration and print the effective values
    python -m meshproblem.cli check-config --file plugin.json

    # Serve the filtered application
    python -m meshproblem.cli serve --port 8080
"""

import argparse
import json
import logging
import sys

from meshproblem.application.problem.configuration import build_plugin_configuration
from meshproblem.domain.problem.errors import ConfigError
from meshproblem.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_check_config(args: argparse.Namespace) -> int:
    """Validate a plugin configuration file and print the effective values."""
    if args.file == "-":
        raw = sys.stdin.buffer.read()
    else:
        try:
            with open(args.file, "rb") as handle:
                raw = handle.read()
        except OSError as exc:
            logger.error("Cannot read plugin configuration %s: %s", args.file, exc)
            return 1

    try:
        configuration = build_plugin_configuration(raw)
    except ConfigError as exc:
        logger.error("Invalid plugin configuration: %s", exc.reason)
        return 1

    effective = {
        "targetURLPrefixes": list(configuration.target_url_prefixes),
        "startStatusCode": configuration.start_status_code,
        "endStatusCode": configuration.end_status_code,
        "problemTypeURIMap": dict(configuration.problem_type_uri_map),
        "problemTitle": configuration.problem_title,
    }
    print(json.dumps(effective, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the FastAPI application with the filter installed."""
    import uvicorn

    logger.info("Starting application at http://%s:%d", args.host, args.port)
    uvicorn.run("meshproblem.main:app", host=args.host, port=args.port, reload=False)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Mesh Problem Details CLI")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Check config
    check_parser = subparsers.add_parser(
        "check-config", help="Validate a plugin configuration"
    )
    check_parser.add_argument(
        "--file", required=True, help="Path to the JSON configuration, or - for stdin"
    )
    check_parser.set_defaults(func=cmd_check_config)

    # Serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, stream=sys.stderr)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
