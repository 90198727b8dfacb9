"""Export a file of Kubernetes events through a sink once. Use --help for usage."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from prometheus_client import start_http_server

from config.config import load_config
from core.errors.exceptions import ConfigurationError
from core.logging.setup import setup_logging
from kube_eventer.events import DomainEvent, EventBatch
from kube_eventer.sinks.factory import build_sink

# Project root directory (where .env file is located)
# __main__.py is at src/kube_eventer/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export Kubernetes events to a sink",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Export events from a file to EventBridge
    python -m kube_eventer --sink 'eventbridge:?clusterId=c1234' --events events.json

    # Read settings from a YAML file, JSON logs to stdout
    python -m kube_eventer --sink 'eventbridge:?clusterId=c1234' --events events.json \\
        --config config.yaml --json-logs
        """,
    )

    parser.add_argument(
        "--sink",
        required=True,
        help="Sink URI, e.g. eventbridge:?clusterId=c1234",
    )

    parser.add_argument(
        "--events",
        required=True,
        type=Path,
        help="JSON file holding a list of events or a Kubernetes List object",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: src/config/config.yaml if present)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines on stdout",
    )

    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Serve Prometheus metrics on this port while exporting",
    )

    return parser.parse_args(argv)


def load_events(path: Path) -> list[DomainEvent]:
    """Read events from a JSON list or a Kubernetes ``List`` (``items``)."""
    try:
        document: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read events file: {path}", cause=e) from e

    if isinstance(document, dict):
        document = document.get("items", [])
    if not isinstance(document, list):
        raise ConfigurationError(f"Events file must hold a list or a List object: {path}")

    return [DomainEvent.from_kube(item) for item in document if isinstance(item, dict)]


def main(argv: list[str] | None = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    args = parse_args(argv)

    setup_logging(
        console_level=getattr(logging, args.log_level),
        json_format=args.json_logs,
    )

    if args.metrics_port is not None:
        start_http_server(args.metrics_port)

    try:
        base_config = load_config(args.config, validate=False)
        sink = build_sink(args.sink, base_config=base_config)
        events = load_events(args.events)
    except ConfigurationError as e:
        logger.error("Configuration error", extra={"error": str(e)})
        return EXIT_CONFIG_ERROR

    try:
        result = sink.export_events(EventBatch(events=events))
    finally:
        sink.stop()

    print(json.dumps(vars(result)))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
