# src/main.py - v2
"""CLI entry point: review, stages commands.

Usage:
    codereview review --repo-path <dir> [--pattern GLOB] [--provider NAME] [--model NAME]
    codereview stages

Exit codes: 0 when the batch completes (even if some items failed),
1 for invalid configuration, a missing repository or no matching files,
130 when interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from codereview.core.errors import ConfigurationError
from codereview.version import __version__

if TYPE_CHECKING:
    from codereview.config.settings import Settings
    from codereview.pipeline.cancellation import CancellationToken

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="codereview",
        description=f"codereview v{__version__}: AI-powered code review assistant",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- review ---
    p_review = subparsers.add_parser(
        "review", help="Review source files in a local repository",
    )
    p_review.add_argument(
        "--repo-path", type=Path, required=True,
        help="Path to the local git repository to review",
    )
    p_review.add_argument(
        "--pattern", default=None,
        help="File pattern to match, e.g. *.cs or *.py (default: *.cs)",
    )
    p_review.add_argument(
        "--provider", default=None,
        help="AI model provider: ollama or openai (default: ollama)",
    )
    p_review.add_argument(
        "--model", default=None,
        help="Model name to use (default: llama3.2)",
    )
    p_review.add_argument(
        "--max-files", type=int, default=None,
        help="Review at most this many files (default: 3)",
    )
    p_review.add_argument(
        "--concurrency", type=int, default=None,
        help="Files reviewed concurrently (default: 1, sequential)",
    )
    p_review.add_argument(
        "--timeout", type=float, default=None,
        help="Per-call inference timeout in seconds (default: 120)",
    )
    p_review.add_argument(
        "--deadline", type=float, default=None,
        help="Stop starting new stages after this many seconds",
    )
    p_review.set_defaults(func=_cmd_review)

    # --- stages ---
    p_stages = subparsers.add_parser(
        "stages", help="List the review stages in execution order",
    )
    p_stages.set_defaults(func=_cmd_stages)

    return parser


async def _cmd_review(args: argparse.Namespace) -> int:
    """Discover files and run the review pipeline over each of them."""
    from codereview.batch.loader import FileContentLoader
    from codereview.batch.runner import BatchRunner
    from codereview.batch.scanner import SourceScanner
    from codereview.config.settings import load_settings
    from codereview.core.errors import NoInputError
    from codereview.llm.client_factory import create_llm_client
    from codereview.llm.gateway import InferenceGateway
    from codereview.pipeline.cancellation import CancellationToken
    from codereview.pipeline.executor import PipelineExecutor
    from codereview.pipeline.pipeline import default_review_pipeline
    from codereview.tracking.exporter import (
        export_metrics,
        format_batch_summary,
        format_run_report,
    )
    from codereview.tracking.stage_tracker import aggregate_by_stage
    from codereview.tracking.telemetry import init_telemetry

    settings = load_settings(
        review_file_pattern=args.pattern,
        llm_default_provider=args.provider,
        llm_default_model=args.model,
        review_max_files=args.max_files,
        batch_concurrency=args.concurrency,
        gateway_timeout_s=args.timeout,
        batch_deadline_s=args.deadline,
    )
    _apply_logging_settings(settings, args.verbose)

    repo_path: Path = args.repo_path
    logger.info("Starting code review for repository: %s", repo_path)
    if not repo_path.is_dir():
        logger.error("Repository path does not exist: %s", repo_path)
        return 1

    pipeline = default_review_pipeline()
    client = create_llm_client(
        settings.llm_default_provider, settings.llm_default_model, settings,
    )

    scanner = SourceScanner(
        pattern=settings.review_file_pattern,
        excluded_dirs=settings.review_excluded_dirs_list,
        recursive=settings.review_recursive,
    )
    entries = scanner.scan(repo_path, limit=settings.review_max_files)
    gateway = InferenceGateway(
        client,
        timeout_s=settings.gateway_timeout_s,
        max_concurrency=settings.batch_concurrency,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )
    telemetry = init_telemetry(settings)
    executor = PipelineExecutor(pipeline, gateway, telemetry=telemetry)
    runner = BatchRunner(
        executor,
        FileContentLoader(root=repo_path),
        concurrency=settings.batch_concurrency,
        on_result=lambda result: print(format_run_report(result), flush=True),
    )

    token = CancellationToken(deadline_s=settings.batch_deadline_s)
    loop = asyncio.get_running_loop()
    handler_installed = _install_interrupt_handler(loop, token)
    try:
        outcome = await runner.run([e.relative_path for e in entries], cancellation=token)
    except NoInputError:
        logger.warning("No files found matching pattern %s", settings.review_file_pattern)
        print(f"No files found matching pattern {settings.review_file_pattern} in {repo_path}")
        return 1
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)
        telemetry.shutdown()
        if settings.telemetry_metrics_path is not None:
            export_metrics(telemetry, settings.telemetry_metrics_path)

    print(format_batch_summary(outcome, aggregate_by_stage(telemetry.spans)))
    logger.info("Code review completed")
    return 0


async def _cmd_stages(args: argparse.Namespace) -> int:
    """Print the default review pipeline."""
    from codereview.pipeline.pipeline import default_review_pipeline

    pipeline = default_review_pipeline()
    print(f"\nReview pipeline ({len(pipeline)} stages):")
    for index, stage in enumerate(pipeline, start=1):
        first_line = stage.instructions.splitlines()[0]
        print(f"  {index}. {stage.name:<22s} {first_line}")
    return 0


def _install_interrupt_handler(
    loop: asyncio.AbstractEventLoop, token: CancellationToken,
) -> bool:
    """First Ctrl+C stops new stages from starting; in-flight calls finish."""
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel, "interrupted by user")
    except (NotImplementedError, RuntimeError):
        # Windows event loops and non-main threads do not support this
        return False
    return True


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from codereview.logging.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "INFO", log_format="text")


def _apply_logging_settings(settings: Settings, verbose: bool) -> None:
    """Reconfigure logging from settings (format, optional log file)."""
    from codereview.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
