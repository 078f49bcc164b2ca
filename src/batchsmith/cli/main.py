"""CLI entry point for running and inspecting generation jobs."""
import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional
from batchsmith.config import get_settings
from batchsmith.core.database import SessionLocal, init_db
from batchsmith.repositories.app_setting_repository import AppSettingRepository
from batchsmith.services.orchestrator import Orchestrator
from batchsmith.services.progress import ProgressReporter
from batchsmith.services.retry_engine import RetryEngine
from batchsmith.services.retry_policy import SettingsRetryPolicySource
from batchsmith.services.task_registry import default_task_registry
from batchsmith.services.task_store import SqlTaskExecutionStore
from batchsmith.worker.generators import build_demo_registry

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def init_database() -> int:
    """
    Create tables and seed default retry settings.

    Returns:
        int: Number of settings inserted
    """
    init_db()
    session = SessionLocal()
    try:
        inserted = AppSettingRepository(session).seed_defaults()
    finally:
        session.close()
    logger.info(f"Database initialized, {inserted} default settings inserted")
    return inserted


def _parse_flaky(values: List[str]) -> Dict[str, int]:
    flaky = {}
    for value in values:
        name, _, failures = value.partition("=")
        flaky[name] = int(failures or 1)
    return flaky


async def run_job(job_id: str, flaky: Optional[Dict[str, int]] = None) -> dict:
    """
    Orchestrate a job with the demo generators.

    Args:
        job_id: Job identifier
        flaky: task name → failures before success

    Returns:
        dict: Job result summary
    """
    settings = get_settings()
    tasks = default_task_registry()
    store = SqlTaskExecutionStore(SessionLocal)
    engine = RetryEngine(
        store,
        SettingsRetryPolicySource(SessionLocal, settings),
        strict_attempt_tracking=settings.STRICT_ATTEMPT_TRACKING,
    )
    orchestrator = Orchestrator(store, engine, tasks)
    work_registry = build_demo_registry(tasks, flaky=flaky)

    job_result = await orchestrator.orchestrate(job_id, work_registry.bind(job_id))
    return {
        "job_id": job_id,
        "success": job_result.success,
        "progress": job_result.progress.to_dict(),
        "results": [
            {
                "task_id": r.task_id,
                "task_name": r.task_name,
                "status": r.status.value,
                "error": r.error,
                "reason": r.reason,
            }
            for r in job_result.results
        ],
    }


async def job_progress(job_id: str) -> dict:
    """Report progress for a job."""
    reporter = ProgressReporter(SqlTaskExecutionStore(SessionLocal))
    progress = await reporter.report(job_id)
    return {"job_id": job_id, "progress": progress.to_dict()}


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(prog="batchsmith", description="Batched content generation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create tables and seed default retry settings")

    run_parser = subparsers.add_parser("run", help="Run or resume a job with demo generators")
    run_parser.add_argument("job_id")
    run_parser.add_argument(
        "--flaky",
        action="append",
        default=[],
        metavar="TASK=N",
        help="Make TASK fail N times before succeeding",
    )

    progress_parser = subparsers.add_parser("progress", help="Print job progress as JSON")
    progress_parser.add_argument("job_id")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().LOG_LEVEL)

    try:
        if args.command == "init-db":
            init_database()
            return 0
        if args.command == "run":
            summary = asyncio.run(run_job(args.job_id, _parse_flaky(args.flaky)))
            print(json.dumps(summary, indent=2, default=str))
            return 0 if summary["success"] else 1
        summary = asyncio.run(job_progress(args.job_id))
        print(json.dumps(summary, indent=2))
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted; re-run the job to resume")
        return 130
    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
