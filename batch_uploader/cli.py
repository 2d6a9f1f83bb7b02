"""Command line interface for batch_uploader package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from rich.logging import RichHandler
from rich.markup import escape

from .cli_progress import BatchUploadProgressDisplay, err_console, render_configuration_summary
from .models import FileCategory, UploadCandidate, UploadConfig, UploadOptions
from .orchestrator import BatchUploadOrchestrator
from .orchestrator.file_collector import FileCollector


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Route library logs through rich.

    Logs stay off unless --debug or --log-level asks for them. Returns the
    effective level name, or "silent".
    """
    root = logging.getLogger()
    root.handlers.clear()
    logging.disable(logging.NOTSET)

    if silent or not (debug or log_level):
        logging.disable(logging.CRITICAL)
        return "silent"

    level = logging.DEBUG if debug else logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = RichHandler(
        console=err_console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    return logging.getLevelName(level)


def _unquote(value: str) -> str:
    if len(value) > 1 and value[0] in ("'", '"') and value.endswith(value[0]):
        return value[1:-1]
    return value


def _parse_env_text(content: str) -> Dict[str, str]:
    """KEY=VALUE pairs of a .env file. Comments and ``export`` prefixes are allowed."""
    values: Dict[str, str] = {}
    for line in (raw.strip() for raw in content.splitlines()):
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            values[key] = _unquote(value.strip())
    return values


def _load_env_file(path: Path, override: bool = False) -> None:
    """Export a .env file into os.environ; the shell wins unless override is set."""
    if not path.is_file():
        reason = "env path is not a file" if path.exists() else "env file not found"
        raise CLIError(f"{reason}: {path}")

    try:
        values = _parse_env_text(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"cannot read env file {path}: {exc}") from exc

    for key, value in values.items():
        if override:
            os.environ[key] = value
        else:
            os.environ.setdefault(key, value)


def _default_env_file() -> Optional[Path]:
    candidate = Path.cwd() / ".env"
    return candidate if candidate.is_file() else None


def _parse_category(value: str) -> FileCategory:
    try:
        return FileCategory(value.strip().upper())
    except ValueError:
        choices = ", ".join(c.value for c in FileCategory)
        raise CLIError(f"unknown category {value!r} (choose from: {choices})") from None


def _build_config(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> UploadConfig:
    """Flags override BATCH_UPLOAD_* variables, which override defaults."""
    try:
        config = UploadConfig.from_env(environ)
        overrides = {}
        if args.api_url:
            overrides["api_url"] = args.api_url
        if args.batch_size is not None:
            overrides["batch_size"] = args.batch_size
        if overrides:
            config = replace(config, **overrides)
    except ValueError as exc:
        raise CLIError(f"invalid configuration: {exc}") from exc
    return config


def _build_options(args: argparse.Namespace, display: BatchUploadProgressDisplay) -> UploadOptions:
    if args.max_files is not None and args.max_files < 0:
        raise CLIError("--max-files must be >= 0")
    return UploadOptions(
        category=_parse_category(args.category),
        project_id=args.project_id,
        description=args.description,
        tags=tuple(args.tag or ()),
        max_files=args.max_files,
        on_success=display.on_success,
        on_error=display.on_error,
        on_progress=display.on_progress,
    )


def _collect_candidates(paths: Sequence[Path]) -> List[UploadCandidate]:
    try:
        candidates = FileCollector.collect_candidates(paths)
    except OSError as exc:
        raise CLIError(str(exc)) from exc
    if not candidates:
        raise CLIError("no files found to upload")
    return candidates


async def _run_upload(
    candidates: List[UploadCandidate],
    args: argparse.Namespace,
    config: UploadConfig,
    token: Optional[str],
) -> int:
    display = BatchUploadProgressDisplay(candidates, config.batch_size)
    options = _build_options(args, display)

    async with BatchUploadOrchestrator(options, config=config, token=token) as orchestrator:
        display.start()
        try:
            result = await orchestrator.upload_files(candidates)
        finally:
            display.stop()

    display.finish(result)
    return 0 if result.success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-upload",
        description="Validate and upload files in batches to the file API.",
    )
    parser.add_argument("paths", nargs="*", type=Path, help="Files or folders to upload")
    parser.add_argument(
        "-c",
        "--category",
        default=None,
        help="File category (" + ", ".join(c.value for c in FileCategory) + ")",
    )
    parser.add_argument("-p", "--project-id", default=None, help="Associate files with this project")
    parser.add_argument("-d", "--description", default=None, help="Description stored with every file")
    parser.add_argument(
        "-t",
        "--tag",
        action="append",
        default=None,
        help="Tag stored with every file (repeatable)",
    )
    parser.add_argument(
        "-m",
        "--max-files",
        type=int,
        default=None,
        help="Abort when more than this many files pass validation",
    )
    parser.add_argument(
        "-b",
        "--batch-size",
        type=int,
        default=None,
        help="Files per request (default from BATCH_UPLOAD_BATCH_SIZE or 5)",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="API base URL (default from BATCH_UPLOAD_API_URL)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Bearer token (default from BATCH_UPLOAD_TOKEN)",
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
    parser.add_argument(
        "--version",
        action="version",
        version="batch-upload (from batch_uploader)",
    )
    return parser


def _fail(message: str) -> int:
    err_console.print(f"[bold red]ERROR:[/bold red] {escape(message)}", soft_wrap=True)
    return 1


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file = args.env_file or _default_env_file()
    try:
        if env_file is not None:
            _load_env_file(Path(env_file))
    except CLIError as exc:
        return _fail(str(exc))

    log_mode = _setup_logging(debug=args.debug, silent=args.silent, log_level=args.log_level)

    if not args.paths:
        parser.print_help()
        return 0

    try:
        if not args.category:
            raise CLIError("--category is required")
        category = _parse_category(args.category)
        config = _build_config(args)
        candidates = _collect_candidates([Path(p).expanduser() for p in args.paths])
    except CLIError as exc:
        return _fail(str(exc))

    token = args.token or os.getenv("BATCH_UPLOAD_TOKEN")

    render_configuration_summary(
        {
            "Files": len(candidates),
            "Category": category.value,
            "Project": args.project_id,
            "Tags": ", ".join(args.tag) if args.tag else None,
            "Max Files": args.max_files or None,
            "Batch Size": config.batch_size,
            "API": config.api_url,
            "Auth": "bearer token" if token else "none",
            "Env File": env_file,
            "Logging": log_mode,
        }
    )

    try:
        return asyncio.run(_run_upload(candidates, args, config, token))
    except CLIError as exc:
        return _fail(str(exc))
    except KeyboardInterrupt:
        err_console.print("[yellow]Cancelled.[/yellow]")
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
