"""Unit tests for the work registry."""
import pytest
from batchsmith.worker.work_registry import WorkRegistry


async def sample_work(job_id):
    """Sample work factory for testing."""
    return {"job_id": job_id}


class TestWorkRegistry:
    """Test work factory registration and binding."""

    def test_register_and_get(self):
        """Test registering a factory and retrieving it."""
        registry = WorkRegistry()
        registry.register_work("bump_full", sample_work)

        assert registry.get_work("bump_full") is sample_work
        assert registry.has_work("bump_full")

    def test_register_duplicate_raises(self):
        """Test duplicate registration raises ValueError."""
        registry = WorkRegistry()
        registry.register_work("bump_full", sample_work)

        with pytest.raises(ValueError, match="already registered"):
            registry.register_work("bump_full", sample_work)

    def test_get_unregistered_raises(self):
        """Test getting unregistered work raises KeyError."""
        registry = WorkRegistry()

        with pytest.raises(KeyError, match="No work registered for task: missing"):
            registry.get_work("missing")

    def test_decorator_registration(self):
        """Test registering with the decorator."""
        registry = WorkRegistry()

        @registry.register("all_emails")
        async def generate_emails(job_id):
            return job_id

        assert registry.get_work("all_emails") is generate_emails
        assert registry.list_work() == ["all_emails"]

    @pytest.mark.asyncio
    async def test_bind_captures_job_id(self):
        """Test bound work functions take no arguments and see the job id."""
        registry = WorkRegistry()
        registry.register_work("a", sample_work)
        registry.register_work("b", sample_work)

        work_functions = registry.bind("job-42")

        assert set(work_functions) == {"a", "b"}
        assert await work_functions["a"]() == {"job_id": "job-42"}
        assert await work_functions["b"]() == {"job_id": "job-42"}

    @pytest.mark.asyncio
    async def test_bound_work_starts_fresh_each_call(self):
        """Test each call of a bound work function runs the factory again."""
        calls = []

        async def counting(job_id):
            calls.append(job_id)
            return len(calls)

        registry = WorkRegistry()
        registry.register_work("a", counting)
        work = registry.bind("job")["a"]

        assert await work() == 1
        assert await work() == 2
