"""Unit tests for newsgate.errors."""

from __future__ import annotations

import pytest

from newsgate.errors import ErrorCode, QuotaExceededError


class TestQuotaExceededError:
    @pytest.mark.parametrize(
        ("seconds_remaining", "expected"),
        [
            (0.2, "Retry after 1 seconds."),
            (0.0, "Retry after 1 seconds."),
            (799.1, "Retry after 800 seconds."),
        ],
    )
    def test_suggestion_rounds_up(self, seconds_remaining: float, expected: str) -> None:
        assert QuotaExceededError("news", seconds_remaining).suggestion == expected

    def test_to_dict_carries_retry_after(self) -> None:
        error = QuotaExceededError("search", 12.5).to_dict()["error"]
        assert error["code"] == ErrorCode.QUOTA_EXCEEDED
        assert error["retry_after_seconds"] == 12.5
        assert error["recoverable"] is True
