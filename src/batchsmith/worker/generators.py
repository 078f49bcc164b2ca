"""Demo generators standing in for provider-backed content generation."""
import asyncio
from typing import Any, Dict, Mapping, Optional
from batchsmith.core.exceptions import ProviderError
from batchsmith.services.task_registry import TaskRegistry
from batchsmith.worker.work_registry import WorkFactory, WorkRegistry


def make_echo_generator(task_name: str, delay: float = 0.0) -> WorkFactory:
    """
    Generator that returns a stub section for its task.

    Args:
        task_name: Catalogue task name to echo back
        delay: Seconds to sleep, simulating provider latency
    """

    async def echo_generator(job_id: str) -> Dict[str, Any]:
        if delay:
            await asyncio.sleep(delay)
        return {"job_id": job_id, "task_name": task_name, "content": f"Generated {task_name}"}

    return echo_generator


def make_flaky_generator(
    task_name: str, failures: int, status_code: Optional[int] = 529
) -> WorkFactory:
    """
    Generator that fails ``failures`` times per job, then succeeds.

    The default status code (529, provider overloaded) is retryable.
    """
    calls: Dict[str, int] = {}
    succeed = make_echo_generator(task_name)

    async def flaky_generator(job_id: str) -> Dict[str, Any]:
        calls[job_id] = calls.get(job_id, 0) + 1
        if calls[job_id] <= failures:
            raise ProviderError(
                f"Provider overloaded (call {calls[job_id]})", status_code=status_code
            )
        return await succeed(job_id)

    return flaky_generator


def build_demo_registry(
    tasks: TaskRegistry,
    flaky: Optional[Mapping[str, int]] = None,
    delay: float = 0.0,
) -> WorkRegistry:
    """
    Register a demo generator for every task in the catalogue.

    Args:
        tasks: Task catalogue
        flaky: task name → number of failures before success
        delay: Simulated latency for echo generators

    Returns:
        WorkRegistry: Registry covering the whole catalogue
    """
    flaky = flaky or {}
    registry = WorkRegistry()
    for task in tasks:
        if task.name in flaky:
            registry.register_work(task.name, make_flaky_generator(task.name, flaky[task.name]))
        else:
            registry.register_work(task.name, make_echo_generator(task.name, delay))
    return registry
