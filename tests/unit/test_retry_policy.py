"""Unit tests for retry policy and policy sources."""
import pytest
from batchsmith.config import Settings
from batchsmith.services.retry_policy import (
    DEFAULT_RETRY_DELAY,
    RetryPolicy,
    SettingsRetryPolicySource,
    StaticRetryPolicySource,
)


class TestRetryPolicy:
    """Test delay lookup and validation."""

    def test_default_policy(self):
        """Test defaults are 7 attempts with escalating delays."""
        policy = RetryPolicy()

        assert policy.max_attempts == 7
        assert policy.delays == (5.0, 30.0, 120.0, 300.0, 300.0, 300.0)

    def test_first_attempt_never_waits(self):
        """Test attempt 1 has no delay."""
        assert RetryPolicy(delays=(10,)).delay_before(1) == 0.0

    def test_delay_before_uses_index_offset(self):
        """Test delays[0] is the wait before attempt 2."""
        policy = RetryPolicy(delays=(1, 2, 3), max_attempts=4)

        assert policy.delay_before(2) == 1.0
        assert policy.delay_before(3) == 2.0
        assert policy.delay_before(4) == 3.0

    def test_delay_beyond_configured_uses_default(self):
        """Test attempts past the configured delays wait the default."""
        policy = RetryPolicy(delays=(1,), max_attempts=5)

        assert policy.delay_before(3) == DEFAULT_RETRY_DELAY

    def test_rejects_zero_attempts(self):
        """Test max_attempts below 1 is rejected."""
        with pytest.raises(ValueError, match="at least 1"):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_delay(self):
        """Test negative delays are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            RetryPolicy(delays=(5, -1))

    def test_from_settings(self):
        """Test fallback policy mirrors configured settings."""
        settings = Settings(
            DATABASE_URL="sqlite://", RETRY_DELAYS=[1, 2], MAX_RETRY_ATTEMPTS=3
        )

        policy = RetryPolicy.from_settings(settings)

        assert policy == RetryPolicy(delays=(1.0, 2.0), max_attempts=3)


class TestBuildPolicy:
    """Test merging raw app_settings values over a fallback."""

    def test_empty_values_use_fallback(self):
        """Test missing keys fall back entirely."""
        fallback = RetryPolicy()

        policy = SettingsRetryPolicySource.build_policy({}, fallback)

        assert policy == fallback

    def test_overrides_delays_and_attempts(self):
        """Test stored values override the fallback."""
        values = {
            "max_retry_attempts": "3",
            "retry_attempt_2_delay": "1",
            "retry_attempt_3_delay": "2.5",
        }

        policy = SettingsRetryPolicySource.build_policy(values, RetryPolicy())

        assert policy.max_attempts == 3
        assert policy.delays == (1.0, 2.5)

    def test_zero_delay_is_kept(self):
        """Test an explicit zero delay is honoured, not treated as missing."""
        values = {"max_retry_attempts": "2", "retry_attempt_2_delay": "0"}

        policy = SettingsRetryPolicySource.build_policy(values, RetryPolicy())

        assert policy.delay_before(2) == 0.0

    def test_malformed_values_fall_back(self):
        """Test unparsable or invalid values are ignored."""
        values = {
            "max_retry_attempts": "many",
            "retry_attempt_2_delay": "soon",
            "retry_attempt_3_delay": "-4",
        }
        fallback = RetryPolicy()

        policy = SettingsRetryPolicySource.build_policy(values, fallback)

        assert policy.max_attempts == fallback.max_attempts
        assert policy.delay_before(2) == fallback.delay_before(2)
        assert policy.delay_before(3) == fallback.delay_before(3)

    def test_non_positive_max_attempts_falls_back(self):
        """Test max_retry_attempts of 0 uses the fallback value."""
        policy = SettingsRetryPolicySource.build_policy(
            {"max_retry_attempts": "0"}, RetryPolicy(max_attempts=4)
        )

        assert policy.max_attempts == 4

    def test_longer_budget_extends_delays(self):
        """Test attempts beyond the fallback delays get the default delay."""
        policy = SettingsRetryPolicySource.build_policy(
            {"max_retry_attempts": "9"}, RetryPolicy()
        )

        assert len(policy.delays) == 8
        assert policy.delay_before(9) == DEFAULT_RETRY_DELAY


class TestPolicySources:
    """Test policy source loading."""

    @pytest.mark.asyncio
    async def test_static_source_returns_same_policy(self):
        """Test static source ignores the job id."""
        policy = RetryPolicy(delays=(0,), max_attempts=2)
        source = StaticRetryPolicySource(policy)

        assert await source.load("job-1") is policy
        assert await source.load("job-2") is policy

    @pytest.mark.asyncio
    async def test_static_source_default(self):
        """Test static source defaults to the default policy."""
        assert await StaticRetryPolicySource().load("job") == RetryPolicy()

    @pytest.mark.asyncio
    async def test_settings_source_falls_back_when_unreachable(self):
        """Test an unreachable settings store yields the configured defaults."""

        def broken_session_factory():
            raise ConnectionError("database down")

        settings = Settings(DATABASE_URL="sqlite://", RETRY_DELAYS=[7], MAX_RETRY_ATTEMPTS=2)
        source = SettingsRetryPolicySource(broken_session_factory, settings)

        policy = await source.load("job-1")

        assert policy == RetryPolicy(delays=(7,), max_attempts=2)
