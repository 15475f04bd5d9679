"""CLI entry point for Easy Patcher."""
import argparse
from dotenv import load_dotenv
import json
import os
import sys
import traceback

from easy_patcher.cli.menu import MenuApp
from easy_patcher.logging_setup import setup_logger
from easy_patcher.orchestrator.exceptions import OrchestratorError
from easy_patcher.orchestrator.graph import ABORT_PREFIX
from easy_patcher.orchestrator.runner import PatchRunner
from easy_patcher.prompter import ConsolePrompter
from easy_patcher.store.exceptions import StoreError
from easy_patcher.store.task_store import TaskStore

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_STORE_ERROR = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_ABORTED = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

# Defaults, overridable through the environment or a .env file
DEFAULT_CONFIG = "config.json"
DEFAULT_OUTPUT_DIR = "patches"
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_LOG_LEVEL = "WARNING"

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser.

    Defaults are read from the environment at call time so a loaded .env file
    applies.
    """
    config = os.getenv("EASY_PATCHER_CONFIG", DEFAULT_CONFIG)
    output_dir = os.getenv("EASY_PATCHER_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
    history_limit = _env_int("EASY_PATCHER_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)
    log_level = os.getenv("EASY_PATCHER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    parser = argparse.ArgumentParser(
        prog="easy-patcher",
        description="Build patch bundles from selected VCS revisions",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=config,
        help=f"Task store file (default: {config})",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=output_dir,
        help=f"Root directory for patch bundles (default: {output_dir})",
    )
    parser.add_argument(
        "--history-limit",
        type=int,
        default=history_limit,
        help=f"Revisions listed per project, 0 for all (default: {history_limit})",
    )
    parser.add_argument(
        "--task",
        type=str,
        default="",
        help="Run the patch flow for this task directly, skipping the menu",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=log_level if log_level in LOG_LEVELS else DEFAULT_LOG_LEVEL,
        choices=LOG_LEVELS,
        help="Console log level",
    )
    parser.add_argument("--log-file", type=str, default="", help="Also log to this file")
    parser.add_argument("--verbose", action="store_true", help="Print tracebacks on errors")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print config and exit without running"
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Output results as JSON"
    )
    return parser


def format_result_json(result: dict) -> str:
    """Serialize a patch run result to a JSON string.

    Pydantic values are dumped through model_dump; anything else that json
    cannot encode falls back to str().
    """

    def _serialize(obj):
        if hasattr(obj, "model_dump"):
            return obj.model_dump()
        if isinstance(obj, list):
            return [_serialize(item) for item in obj]
        if isinstance(obj, dict):
            return {key: _serialize(value) for key, value in obj.items()}
        return obj

    keys = ("task_name", "run_label", "confirmed", "aborted", "outputs", "notices", "errors")
    prepared = {key: _serialize(result.get(key)) for key in keys}
    return json.dumps(prepared, indent=2, default=str)


def print_result_human(result: dict) -> None:
    """Print a patch run result in human-readable format."""
    print(f"\n{'='*60}")
    print("Easy Patcher Results")
    print(f"{'='*60}")
    print(f"\nTask: {result.get('task_name')}  run: {result.get('run_label')}")

    outputs = result.get("outputs", [])
    print(f"\nPatch bundles written: {len(outputs)}")
    for output in outputs:
        print(f"  - {output.output_dir}")
        if output.artifact_warning:
            print(f"    artifact skipped: {output.artifact_warning}")
        for path in output.missing_files:
            print(f"    missing: {path}")

    notices = result.get("notices", [])
    if notices:
        print(f"\nNotices ({len(notices)}):")
        for notice in notices:
            print(f"  - {notice}")

    errors = result.get("errors", [])
    if errors:
        print(f"\nErrors ({len(errors)}):")
        for err in errors:
            print(f"  - {err}")

    print(f"\n{'='*60}")


def determine_exit_code(result: dict) -> int:
    """Determine the exit code from a patch run result."""
    if result.get("aborted") or any(
        str(notice).startswith(ABORT_PREFIX) for notice in result.get("notices", [])
    ):
        return EXIT_ABORTED
    if result.get("errors"):
        return EXIT_ORCHESTRATOR_ERROR
    return EXIT_SUCCESS


def print_config_human(config: dict) -> None:
    print("\nConfiguration:")
    print(f"{'='*40}")
    for key, value in config.items():
        print(f"  {key}: {value}")
    print(f"{'='*40}")


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.history_limit < 0:
        print("Error: --history-limit must not be negative.", file=sys.stderr)
        return EXIT_INVALID_INPUT

    config = {
        "config": args.config,
        "output_dir": args.output_dir,
        "history_limit": args.history_limit,
        "task": args.task,
        "log_level": args.log_level,
        "log_file": args.log_file,
        "verbose": args.verbose,
        "dry_run": args.dry_run,
        "output_json": args.output_json,
    }

    if args.dry_run:
        if args.output_json:
            print(json.dumps(config, indent=2))
        else:
            print_config_human(config)
        return EXIT_SUCCESS

    setup_logger(level=args.log_level, log_file=args.log_file or None)

    try:
        store = TaskStore(args.config)
        prompter = ConsolePrompter()
        runner = PatchRunner(
            store=store,
            prompter=prompter,
            output_root=args.output_dir,
            history_limit=args.history_limit or None,
        )

        if not args.task:
            MenuApp(store, prompter, runner).run()
            return EXIT_SUCCESS

        result = runner.run(args.task)
        if args.output_json:
            print(format_result_json(result))
        else:
            print_result_human(result)
        return determine_exit_code(result)

    except StoreError as exc:
        return _handle_error("Task store error", exc, args.verbose, EXIT_STORE_ERROR)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)


def run() -> None:
    sys.exit(main())
