"""Tests for retry with exponential backoff."""

from unittest.mock import AsyncMock, patch

import pytest

from ledger_ml.errors import DependencyUnavailableError
from ledger_ml.inference.retry import retry_with_backoff


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_returns_first_success(self) -> None:
        operation = AsyncMock(return_value=[0.1])

        assert await retry_with_backoff(operation, service="embedding service") == [0.1]
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_backoff_delays(self) -> None:
        """Waits 1s then 2s between attempts with the defaults."""
        operation = AsyncMock(side_effect=[ConnectionError(), ConnectionError(), "ok"])

        with patch("ledger_ml.inference.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await retry_with_backoff(operation, service="vector index")

        assert result == "ok"
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_attempts(self) -> None:
        operation = AsyncMock(side_effect=ConnectionError("refused"))

        with patch("ledger_ml.inference.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(DependencyUnavailableError) as exc_info:
                await retry_with_backoff(operation, service="vector index", attempts=3)

        assert operation.await_count == 3
        assert exc_info.value.service == "vector index"
        assert isinstance(exc_info.value.cause, ConnectionError)

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self) -> None:
        operation = AsyncMock(side_effect=KeyError("bug"))

        with pytest.raises(KeyError):
            await retry_with_backoff(
                operation, service="vector index", retry_on=(ConnectionError,)
            )
        operation.assert_awaited_once()
