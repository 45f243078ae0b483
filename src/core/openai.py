"""OpenAI-compatible chat client with timing and call metrics.

Generation calls are made once per user request. They are not retried, so a
failure is reported to the caller straight away.
"""

import logging
import time
from collections import defaultdict
from functools import lru_cache
from typing import Any

from openai import OpenAI

from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Latency thresholds for logging (milliseconds)
SLOW_CALL_THRESHOLD_MS = 2000
VERY_SLOW_CALL_THRESHOLD_MS = 5000


class OpenAIMetrics:
    """Tracks chat completion call metrics for monitoring."""

    def __init__(self, max_samples: int = 500):
        self._samples: list[dict] = []
        self._max_samples = max_samples
        self._total_calls = 0
        self._total_errors = 0

    def record_call(
        self,
        operation: str,
        latency_ms: float,
        model: str,
        tokens_used: int | None = None,
        error: str | None = None,
    ) -> None:
        """Record an API call."""
        self._total_calls += 1
        if error:
            self._total_errors += 1

        self._samples.append(
            {
                "operation": operation,
                "latency_ms": round(latency_ms, 2),
                "model": model,
                "tokens_used": tokens_used,
                "error": error,
                "timestamp": time.time(),
            }
        )

        if len(self._samples) > self._max_samples:
            self._samples = self._samples[-self._max_samples:]

    def get_stats(self) -> dict:
        """Get aggregated stats."""
        if not self._samples:
            return {
                "total_calls": self._total_calls,
                "total_errors": self._total_errors,
                "avg_latency_ms": 0,
                "p95_latency_ms": 0,
            }

        latencies = sorted(s["latency_ms"] for s in self._samples)
        total = len(latencies)

        return {
            "total_calls": self._total_calls,
            "total_errors": self._total_errors,
            "avg_latency_ms": round(sum(latencies) / total, 2),
            "p95_latency_ms": round(latencies[min(int(total * 0.95), total - 1)], 2),
        }

    def get_stats_by_operation(self) -> dict:
        """Get call counts and average latency grouped by operation."""
        by_op: dict[str, list[dict]] = defaultdict(list)
        for sample in self._samples:
            by_op[sample["operation"]].append(sample)

        return {
            op: {
                "count": len(samples),
                "error_count": sum(1 for s in samples if s.get("error")),
                "avg_ms": round(sum(s["latency_ms"] for s in samples) / len(samples), 2),
            }
            for op, samples in by_op.items()
        }


_openai_metrics: OpenAIMetrics | None = None


def get_openai_metrics() -> OpenAIMetrics:
    """Get or create the global metrics instance."""
    global _openai_metrics
    if _openai_metrics is None:
        _openai_metrics = OpenAIMetrics()
    return _openai_metrics


class TimedChatClient:
    """Chat completions wrapper that logs latency and records metrics."""

    def __init__(self, client: OpenAI, metrics: OpenAIMetrics | None = None):
        self._client = client
        self._metrics = metrics or get_openai_metrics()

    def complete(self, operation: str, **kwargs: Any) -> Any:
        """Create a chat completion.

        Args:
            operation: Label for metrics and logs (e.g. "summary").
            **kwargs: Arguments passed to ``chat.completions.create``.

        Returns:
            The chat completion response.
        """
        model = kwargs.get("model", "unknown")
        start_time = time.perf_counter()
        error_msg = None
        tokens_used = None

        try:
            response = self._client.chat.completions.create(**kwargs)

            if getattr(response, "usage", None):
                tokens_used = response.usage.total_tokens

            return response

        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            raise

        finally:
            latency_ms = (time.perf_counter() - start_time) * 1000

            self._metrics.record_call(
                operation=operation,
                latency_ms=latency_ms,
                model=model,
                tokens_used=tokens_used,
                error=error_msg,
            )

            log_msg = "Chat completion %s: model=%s, latency=%.2fms, tokens=%s"
            log_args = (operation, model, latency_ms, tokens_used or "N/A")

            if error_msg:
                logger.error(log_msg + ", error=%s", *log_args, error_msg)
            elif latency_ms > VERY_SLOW_CALL_THRESHOLD_MS:
                logger.warning("VERY SLOW " + log_msg, *log_args)
            elif latency_ms > SLOW_CALL_THRESHOLD_MS:
                logger.warning("SLOW " + log_msg, *log_args)
            else:
                logger.info(log_msg, *log_args)


@lru_cache
def get_openai_client() -> TimedChatClient:
    """Get cached chat client singleton.

    The raw client is created with ``max_retries=0``: generations run once.
    """
    settings = get_settings()
    raw_client = OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        max_retries=0,
    )
    return TimedChatClient(raw_client)
