"""Work registry mapping task names to unit-of-work factories."""
from typing import Any, Awaitable, Callable, Dict, List

# Builds the coroutine for one attempt of a task, given the job id.
WorkFactory = Callable[[str], Awaitable[Any]]


class WorkRegistry:
    """
    Registry for mapping task names to unit-of-work factories.

    Factories take the job id; ``bind`` turns them into the zero-argument
    work functions the orchestrator calls.
    """

    def __init__(self):
        """Initialize empty work registry."""
        self._factories: Dict[str, WorkFactory] = {}

    def register_work(self, task_name: str, factory: WorkFactory) -> None:
        """
        Register a work factory for a task name.

        Args:
            task_name: Catalogue task name
            factory: Coroutine function taking the job id

        Raises:
            ValueError: If work for this task name is already registered
        """
        if task_name in self._factories:
            raise ValueError(f"Work for task '{task_name}' already registered")

        self._factories[task_name] = factory

    def register(self, task_name: str) -> Callable[[WorkFactory], WorkFactory]:
        """
        Decorator for registering a work factory.

        Example:
            >>> registry = WorkRegistry()
            >>> @registry.register("bump_full")
            >>> async def generate_bump(job_id):
            >>>     return {"job_id": job_id}
        """

        def decorator(factory: WorkFactory) -> WorkFactory:
            self.register_work(task_name, factory)
            return factory

        return decorator

    def get_work(self, task_name: str) -> WorkFactory:
        """
        Get the work factory for a task name.

        Raises:
            KeyError: If no work registered for this task name
        """
        if task_name not in self._factories:
            raise KeyError(f"No work registered for task: {task_name}")

        return self._factories[task_name]

    def has_work(self, task_name: str) -> bool:
        """Check if work is registered for a task name."""
        return task_name in self._factories

    def list_work(self) -> List[str]:
        """List all task names with registered work."""
        return list(self._factories.keys())

    def bind(self, job_id: str) -> Dict[str, Callable[[], Awaitable[Any]]]:
        """
        Build the work-function map for one job.

        Args:
            job_id: Job identifier captured by every work function

        Returns:
            Dict: task name → zero-argument coroutine function
        """
        return {
            task_name: _bind_job(factory, job_id)
            for task_name, factory in self._factories.items()
        }


def _bind_job(factory: WorkFactory, job_id: str) -> Callable[[], Awaitable[Any]]:
    def work() -> Awaitable[Any]:
        return factory(job_id)

    return work
