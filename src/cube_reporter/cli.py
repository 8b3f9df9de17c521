"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
import time
from typing import Optional, Sequence

from cube_reporter.config.settings import ReporterSettings
from cube_reporter.errors import ReportError
from cube_reporter.events import AfterAutoStart, AfterTest, BeforeTest
from cube_reporter.hydra_utils import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_PATH,
    compose_config,
    format_config,
    resolve_config,
)
from cube_reporter.io_utils import read_json, write_text_atomic
from cube_reporter.logging_utils import configure_logging, run_with_error_handling
from cube_reporter.report import utc_now_iso, validate_report_payload
from cube_reporter.reporting import render_report_html
from cube_reporter.session import ReportSession

SNAPSHOT_TEST_ID = "cli-snapshot"


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config-path",
        default=DEFAULT_CONFIG_PATH,
        help="Directory holding hydra configs (default: %(default)s).",
    )
    parser.add_argument(
        "--config-name",
        default=DEFAULT_CONFIG_NAME,
        help="Config name inside the config directory (default: %(default)s).",
    )
    parser.add_argument(
        "overrides",
        nargs="*",
        default=[],
        help="Hydra overrides, e.g. reporter.decimal=true docker.executor=dummy.",
    )


def _load_settings(args: argparse.Namespace) -> ReporterSettings:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    return ReporterSettings.from_mapping(resolve_config(cfg))


def _cfg_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    sys.stdout.write(format_config(cfg))


def _environment_handler(args: argparse.Namespace) -> None:
    settings = _load_settings(args)
    session = ReportSession(settings)
    try:
        reporter = session.start()
        reporter.report_docker_environment(AfterAutoStart())
        if args.interval is not None:
            reporter.capture_container_stats_before_test(BeforeTest(SNAPSHOT_TEST_ID))
            time.sleep(max(0.0, args.interval))
            reporter.report_container_stats_after_test(AfterTest(SNAPSHOT_TEST_ID))
        if args.logs:
            session.stop_containers()
        for path in session.write_outputs():
            print(path)
    finally:
        session.close()


def _render_handler(args: argparse.Namespace) -> None:
    source = Path(args.report)
    if not source.exists():
        raise ReportError(f"Report not found: {source}")
    payload = validate_report_payload(read_json(source))
    target = Path(args.out) if args.out else source.with_suffix(".html")
    html_text = render_report_html(
        title=args.title or str(payload.get("title") or "Docker Report"),
        created_at=str(payload.get("created_at") or utc_now_iso()),
        payload=payload,
    )
    write_text_atomic(target, html_text)
    print(target)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cube-reporter",
        description="Docker environment and container statistics reports.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: %(default)s).",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full tracebacks on errors.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    cfg_parser = subparsers.add_parser("cfg", help="Print the composed config.")
    _add_config_arguments(cfg_parser)
    cfg_parser.set_defaults(handler=_cfg_handler)

    env_parser = subparsers.add_parser(
        "environment",
        help="Report the docker environment of the running containers.",
    )
    env_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Also sample container stats twice, this many seconds apart.",
    )
    env_parser.add_argument(
        "--logs",
        action="store_true",
        help="Copy container logs into the report.",
    )
    _add_config_arguments(env_parser)
    env_parser.set_defaults(handler=_environment_handler)

    render_parser = subparsers.add_parser(
        "render",
        help="Render a saved report.json to HTML.",
    )
    render_parser.add_argument("report", help="Path to report.json.")
    render_parser.add_argument("--out", default=None, help="Output HTML path.")
    render_parser.add_argument("--title", default=None, help="Override the report title.")
    render_parser.set_defaults(handler=_render_handler)
    return parser


def _cli_main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args, extras = parser.parse_known_args(argv)
    if extras:
        # Overrides may come after flags; "--key=value" is an override too.
        unknown = [item for item in extras if item.startswith("-") and "=" not in item]
        if unknown or not hasattr(args, "overrides"):
            parser.error(f"unrecognized arguments: {' '.join(extras)}")
        args.overrides = list(args.overrides) + extras
    logging.getLogger("cube_reporter").setLevel(args.log_level)
    args.handler(args)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    logger = configure_logging()
    raw_args = list(sys.argv[1:] if argv is None else argv)
    show_traceback = "--traceback" in raw_args
    run_with_error_handling(_cli_main, argv, logger=logger, show_traceback=show_traceback)


if __name__ == "__main__":
    main()
