# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from contentpulse_sync import operator_actions
from contentpulse_sync.adapters.contentpulse import ContentPulseClient
from contentpulse_sync.app import ContentPulseApp
from contentpulse_sync.boundary import (
    API_KEY_HEADER,
    ROUTE_NAMESPACE,
    IngestionBoundary,
    Request,
    Response,
)
from contentpulse_sync.config import ConfigurationError, configure_logging
from contentpulse_sync.domain.model import SeoExtension

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from contentpulse_sync.config import ContentPulseConfig

log = logging.getLogger(__name__)

_CLIENT_ERROR_STATUSES = frozenset({400, 422})
_LOCAL_COMMANDS = frozenset(
    {"ingest", "show", "delete", "status", "history", "info", "test-connection", "seo-extensions"}
)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise ContentPulse content")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Create or update a record from a JSON payload")
    ingest.add_argument("file", type=str, help="Path to the JSON payload, or - for stdin")

    show = subparsers.add_parser("show", help="Show a synchronised record")
    show.add_argument("id", type=int, help="Local record id")

    delete = subparsers.add_parser("delete", help="Delete a record")
    delete.add_argument("id", type=int, help="Local record id")

    subparsers.add_parser("status", help="Show ingestion status and recent syncs")

    history = subparsers.add_parser("history", help="Show the sync history")
    history.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of entries to show (default: %(default)s)",
    )

    subparsers.add_parser("info", help="Show version and compatibility information")
    subparsers.add_parser("test-connection", help="Check that the API key unlocks the endpoints")
    subparsers.add_parser("handshake", help="Check reachability of the ContentPulse API")
    subparsers.add_parser("ready", help="List ready contents on ContentPulse")

    publish = subparsers.add_parser("publish", help="Ask ContentPulse to publish a ready content")
    publish.add_argument("content_id", type=int, help="ContentPulse content id")

    seo = subparsers.add_parser(
        "seo-extensions", help="Record which SEO extensions are active on the site"
    )
    seo.add_argument(
        "extensions",
        nargs="*",
        choices=[extension.value for extension in SeoExtension],
        help="Active extensions; omit to clear the list",
    )

    return parser.parse_args(list(argv))


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _read_payload(file: str) -> object:
    try:
        raw = sys.stdin.read() if file == "-" else Path(file).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read payload file {file}: {exc}") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Payload is not valid JSON: {exc}") from exc


def _dispatch(
    boundary: IngestionBoundary,
    config: ContentPulseConfig,
    method: str,
    route: str,
    body: object = None,
) -> Response:
    return boundary.dispatch(
        Request(
            method=method,
            path=f"{ROUTE_NAMESPACE}{route}",
            headers={API_KEY_HEADER: config.api_key},
            body=body,
        )
    )


def _exit_code(response: Response) -> int:
    if response.status < 400:  # noqa: PLR2004
        return 0
    return 2 if response.status in _CLIENT_ERROR_STATUSES else 1


def _run_local(app: ContentPulseApp, args: argparse.Namespace) -> int:
    boundary = IngestionBoundary(app)
    config = app.contentpulse
    response: Response | None = None

    if args.command == "ingest":
        response = _dispatch(boundary, config, "POST", "/posts", _read_payload(args.file))
    elif args.command == "show":
        response = _dispatch(boundary, config, "GET", f"/posts/{args.id}")
    elif args.command == "delete":
        response = _dispatch(boundary, config, "DELETE", f"/posts/{args.id}")
    elif args.command == "status":
        response = _dispatch(boundary, config, "GET", "/ingestion/status")
    elif args.command == "info":
        response = _dispatch(boundary, config, "GET", "/plugin-info")
    elif args.command == "history":
        _emit(app.recent_syncs(args.limit))
        return 0
    elif args.command == "test-connection":
        notice = operator_actions.test_connection(boundary, config.api_key)
        _emit(notice.to_dict())
        return 0 if notice.ok else 1
    elif args.command == "seo-extensions":
        app.set_active_seo_extensions(frozenset(SeoExtension(name) for name in args.extensions))
        _emit({"active_seo_extensions": sorted(args.extensions)})
        return 0

    if response is None:
        raise ValueError(f"Unsupported command: {args.command}")
    _emit(response.body)
    return _exit_code(response)


def _run_remote(client: ContentPulseClient, args: argparse.Namespace) -> int:
    if args.command == "handshake":
        result = operator_actions.VersionHandshake(client).check()
        _emit(result)
        return 0 if result["compatible"] else 1
    if args.command == "ready":
        items, error = operator_actions.fetch_ready_contents(client)
        if error:
            _emit({"type": "error", "message": error})
            return 1
        _emit([item.to_dict() for item in items])
        return 0
    if args.command == "publish":
        notice = operator_actions.publish_ready(client, args.content_id)
        _emit(notice.to_dict())
        return 0 if notice.ok else 1
    raise ValueError(f"Unsupported command: {args.command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    app_factory: Callable[[], ContentPulseApp] = ContentPulseApp,
    client_factory: Callable[[], ContentPulseClient] = ContentPulseClient,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        parsed_args = _parse_args(args_list)
        if parsed_args.command in _LOCAL_COMMANDS:
            app = app_factory()
            client = None
        else:
            app = None
            client = client_factory()
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if app is not None:
            app.boot()
            try:
                exit_code = _run_local(app, parsed_args)
            finally:
                app.shutdown()
        elif client is not None:
            exit_code = _run_remote(client, parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
