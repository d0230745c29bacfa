"""Command line interface for futureself package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.logging import RichHandler

from .catalog import CategoryJobIndex
from .cli_progress import ConsolePanel, render_configuration_summary, render_options
from .errors import FutureSelfError
from .models import ImageFile, PluginConfig, TaskState


ENV_ISSUER_URL = "FUTURESELF_ISSUER_URL"
ENV_BUCKET = "FUTURESELF_BUCKET"
ENV_RESULT_URL = "FUTURESELF_RESULT_URL"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=True,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _build_config(transfer_progress: bool = False) -> PluginConfig:
    """Read endpoint settings from the environment."""
    missing = [
        name for name in (ENV_ISSUER_URL, ENV_BUCKET, ENV_RESULT_URL)
        if not os.getenv(name)
    ]
    if missing:
        raise CLIError(f"missing environment variables: {', '.join(missing)}")
    return PluginConfig(
        issuer_url=os.environ[ENV_ISSUER_URL],
        bucket_name=os.environ[ENV_BUCKET],
        result_url=os.environ[ENV_RESULT_URL],
        progress_mode="transfer" if transfer_progress else "simulated",
    )


def _run_categories(category: Optional[str]) -> int:
    index = CategoryJobIndex()
    if category is None:
        render_options("Job categories", index.categories())
        return 0
    if category not in index:
        print(f"ERROR: unknown category: {category}", file=sys.stderr)
        return 1
    render_options(category, index.jobs_for(category))
    return 0


async def _run_task(
    image_path: Optional[Path],
    profession: str,
    config: PluginConfig,
    preview: bool,
) -> int:
    from .orchestrator import UploadOrchestrator

    async with UploadOrchestrator(config) as orchestrator:
        panel = ConsolePanel().attach(orchestrator)

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, orchestrator.cancel)
        except (NotImplementedError, RuntimeError):
            pass  # Windows event loops; Ctrl-C then aborts the run

        try:
            if preview:
                orchestrator.start_preview(profession)
            else:
                orchestrator.start(ImageFile.from_path(image_path), profession)
            task = await orchestrator.wait()
            if task is not None and task.state == TaskState.CANCELED:
                # Keep the notice on screen for its display duration
                await asyncio.sleep(config.notice_duration_ms / 1000)
        finally:
            panel.stop()
            try:
                loop.remove_signal_handler(signal.SIGINT)
            except (NotImplementedError, RuntimeError):
                pass

    if task is None:
        return 1
    if task.state == TaskState.SUCCEEDED:
        return 0
    if task.state == TaskState.CANCELED:
        return 130
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="futureself",
        description="Upload a selfie and receive your future self in a chosen profession.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument("--version", action="version", version="futureself 0.1.0")

    sub = parser.add_subparsers(dest="command")

    categories = sub.add_parser("categories", help="List job categories or the jobs of one")
    categories.add_argument("category", nargs="?", default=None)

    run = sub.add_parser("run", help="Upload a selfie and wait for the result")
    run.add_argument("image", nargs="?", type=Path, help="PNG or JPEG selfie")
    run.add_argument("-p", "--profession", required=True, help="Profession, e.g. Writer")
    run.add_argument(
        "--preview",
        action="store_true",
        help="Run the offline preview flow instead of uploading",
    )
    run.add_argument(
        "--transfer-progress",
        action="store_true",
        help="Drive the progress bar from bytes sent instead of the time estimate",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "categories":
        return _run_categories(args.category)

    try:
        if args.preview:
            config = PluginConfig()
        else:
            if args.image is None:
                raise CLIError("an image is required unless --preview is given")
            image = Path(args.image).expanduser()
            if not image.is_file():
                raise CLIError(f"image does not exist: {image}")
            args.image = image
            config = _build_config(args.transfer_progress)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    render_configuration_summary(
        {
            "Image": str(args.image) if args.image else "-",
            "Profession": args.profession,
            "Mode": "preview" if args.preview else "upload",
            "Progress": config.progress_mode,
            "Issuer": config.issuer_url or "-",
            "Bucket": config.bucket_name or "-",
            "Results": config.result_url or "-",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(_run_task(args.image, args.profession, config, args.preview))
    except FutureSelfError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
