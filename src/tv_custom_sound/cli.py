"""Command-line interface for TV Custom Sound.

This module exposes the control actions as subcommands and a ``route``
command that runs sound sources through the router exactly as an
interception shim would.  Results are printed as JSON on stdout; notices
and log output go to stderr.  Run ``python -m tv_custom_sound --help``
for usage.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .config_service import ConfigService
from .control import ControlSurface
from .errors import SoundRouterError
from .fingerprint import fingerprint, preview
from .notices import Notice, NoticeBus
from .router import SoundRouter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tv-custom-sound",
        description="TV Custom Sound – replace platform sounds with your own",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--portable",
        "-p",
        action="store_true",
        help="Force portable mode (ignored if portable.flag is present)",
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Use this configuration directory instead of the resolved one",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (defaults to config.json, then WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show enabled state, loaded sounds and learned tags")

    sp = subparsers.add_parser("upload", help="Use an audio file as a category's sound")
    sp.add_argument("category", help="Category id or label")
    sp.add_argument("file", help="Path to the audio file")

    sp = subparsers.add_parser("clear", help="Remove a category's sound")
    sp.add_argument("category", help="Category id or label")
    sp.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    sp = subparsers.add_parser("reset", help="Forget every learned tag")
    sp.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    subparsers.add_parser("toggle", help="Toggle sound replacement on/off")
    subparsers.add_parser("enable", help="Turn sound replacement on")
    subparsers.add_parser("disable", help="Turn sound replacement off")

    sp = subparsers.add_parser(
        "route", help="Run sources through the router (arguments, or one per line on stdin)"
    )
    sp.add_argument("sources", nargs="*", help="Sound sources (URLs or data: URIs)")
    sp.add_argument("--tag", default=None, help="Tag the first source as this category")

    sp = subparsers.add_parser("label", help="Set the display label of a category")
    sp.add_argument("category", help="Category id or label")
    sp.add_argument("text", help="New display label")

    sp = subparsers.add_parser("config", help="Show or change config.json")
    sp.add_argument("--categories", nargs="+", default=None, help="Declared categories, in order")
    sp.add_argument(
        "--default-log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level used when --log-level is not given",
    )
    return parser


def _configure_logging(level_name: str) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level_name.upper(), logging.WARNING))
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)


def _print_notice(notice: Notice) -> None:
    print(notice.render(), file=sys.stderr)


def _prompt(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _read_sources(sources: List[str]) -> Iterable[str]:
    if sources:
        return sources
    return [line.strip() for line in sys.stdin if line.strip()]


def _route(router: SoundRouter, sources: Iterable[str], tag: Optional[str]) -> List[dict]:
    if tag:
        router.set_pending_tag(router.categories.resolve(tag))
    results = []
    for source in sources:
        replacement = router.decide(source)
        category = None
        if replacement:
            category = next((c for c in router.categories if router.asset_for(c) == replacement), None)
        results.append(
            {
                "source": preview(source),
                "fingerprint": preview(fingerprint(source)),
                "learned": router.learned_category(source),
                "replaced": replacement is not None,
                "replacement_category": category,
            }
        )
    return results


def _update_config(config_service: ConfigService, config: dict, args: argparse.Namespace) -> int:
    updated = dict(config)
    if args.categories is not None:
        updated["categories"] = args.categories
    if args.default_log_level is not None:
        updated["log_level"] = args.default_log_level
    if updated != config:
        try:
            config_service.save_config(updated, cli_portable=args.portable)
        except (ValueError, OSError) as exc:
            print(f"Error: {exc}")
            return 1
    print(json.dumps(updated, indent=2))
    return 0


def _update_label(config_service: ConfigService, category: str, args: argparse.Namespace) -> int:
    labels = config_service.load_labels(cli_portable=args.portable)
    labels[category] = args.text
    try:
        config_service.save_labels(labels, cli_portable=args.portable)
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}")
        return 1
    print(json.dumps(labels, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    config_service = ConfigService(
        app_dir=Path.cwd(),
        config_dir=Path(args.config_dir).expanduser().resolve() if args.config_dir else None,
    )
    config = config_service.load_config(cli_portable=args.portable)
    _configure_logging(args.log_level or config.get("log_level") or "WARNING")

    if args.command == "config":
        return _update_config(config_service, config, args)

    try:
        categories = config_service.build_categories(cli_portable=args.portable)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1
    bus = NoticeBus()
    bus.subscribe(_print_notice)
    store = config_service.open_store(categories, cli_portable=args.portable)
    router = SoundRouter.from_store(store, categories, bus)
    confirm = (lambda _q: True) if getattr(args, "yes", False) else _prompt
    control = ControlSurface(router, confirm=confirm)

    command = args.command
    try:
        if command == "status":
            status = router.status()
            print(json.dumps(status.to_dict(), indent=2))
            return 0
        if command == "upload":
            ok = control.upload(categories.resolve(args.category), Path(args.file).expanduser())
            return 0 if ok else 1
        if command in {"clear", "reset", "toggle"}:
            if command == "clear":
                control.clear(categories.resolve(args.category))
            elif command == "reset":
                control.reset_tags()
            else:
                control.toggle()
            if control.last_error is not None:
                print(f"Error: {control.last_error}")
                return 1
            return 0
        if command in {"enable", "disable"}:
            router.set_enabled(command == "enable")
            print(json.dumps({"enabled": router.enabled}))
            return 0
        if command == "label":
            return _update_label(config_service, categories.resolve(args.category), args)
        if command == "route":
            results = _route(router, _read_sources(args.sources), args.tag)
            print(json.dumps(results, indent=2))
            return 0
    except SoundRouterError as exc:
        print(f"Error: {exc}")
        return 1
    print(f"Error: unrecognized command {command}")
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
