"""Parallel composition: independent stages over one shared input.

Every stage receives the same input; the results are merged into a dict
keyed by the caller's stage keys, in the caller's key order.

    >>> stages = {"passed": RunnablePassthrough(), "modified": lambda v: v["num"] + 1}
    >>> run_parallel(stages, {"num": 1})
    {'passed': {'num': 1}, 'modified': 2}

Sync `invoke` evaluates stages one after another in key order. Async
`ainvoke` evaluates them concurrently, optionally bounded by
`max_concurrency`.

Failure policy:
- fail_fast=True (default): the first stage exception propagates unchanged;
  in async mode the stages still running are cancelled.
- fail_fast=False: every stage runs; if any failed, ParallelError carries the
  per-key failures plus the partial results of the stages that succeeded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from toolwire.foundation.config import get_settings
from toolwire.foundation.errors import ParallelError
from toolwire.observability import get_logger

from .base import Runnable, coerce_runnable

Input = TypeVar("Input")

log = get_logger("toolwire.parallel")


class RunnableParallel(Runnable[Input, dict[str, Any]], Generic[Input]):
    """Run a mapping of independent stages against the same input.

    Stage values may be Runnables, plain callables, or nested mappings
    (which become nested parallel compositions).

    Example:
        >>> chain = RunnableParallel(
        ...     context=retriever | format_documents,
        ...     question=RunnablePassthrough(),
        ... )
        >>> chain.invoke("where did harrison work?")
        {'context': 'harrison worked at kensho', 'question': 'where did harrison work?'}
    """

    __slots__ = ("_stages", "_fail_fast", "_max_concurrency")

    def __init__(
        self,
        stages: Mapping[str, Any] | None = None,
        /,
        *,
        fail_fast: bool | None = None,
        max_concurrency: int | None = None,
        **kwstages: Any,
    ) -> None:
        merged = {**(stages or {}), **kwstages}
        if not merged:
            raise ValueError("Parallel requires at least one stage")
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")

        defaults = get_settings().parallel
        self._stages: dict[str, Runnable[Input, Any]] = {k: coerce_runnable(v) for k, v in merged.items()}
        self._fail_fast = defaults.fail_fast if fail_fast is None else fail_fast
        self._max_concurrency = max_concurrency if max_concurrency is not None else defaults.max_concurrency

    @property
    def stages(self) -> dict[str, Runnable[Input, Any]]:
        return dict(self._stages)

    @property
    def fail_fast(self) -> bool:
        return self._fail_fast

    @property
    def max_concurrency(self) -> int | None:
        return self._max_concurrency

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    def invoke(self, input: Input) -> dict[str, Any]:
        """Evaluate each stage in key order on the shared input."""
        results: dict[str, Any] = {}
        failures: dict[str, BaseException] = {}

        for key, stage in self._stages.items():
            log.debug("parallel stage", stage=key, runnable=stage.get_name())
            try:
                results[key] = stage.invoke(input)
            except Exception as e:
                log.debug("parallel stage failed", stage=key, error=str(e))
                if self._fail_fast:
                    raise
                failures[key] = e

        if failures:
            raise ParallelError(failures, results)
        return results

    async def ainvoke(self, input: Input) -> dict[str, Any]:
        """Evaluate all stages concurrently on the shared input."""
        sem = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

        async def run(key: str, stage: Runnable[Input, Any]) -> Any:
            log.debug("parallel stage", stage=key, runnable=stage.get_name())
            if sem is None:
                return await stage.ainvoke(input)
            async with sem:
                return await stage.ainvoke(input)

        tasks = {key: asyncio.ensure_future(run(key, stage)) for key, stage in self._stages.items()}

        if self._fail_fast:
            try:
                values = await asyncio.gather(*tasks.values())
            except BaseException:
                for task in tasks.values():
                    task.cancel()
                # Let cancelled stages unwind before the error leaves this frame
                await asyncio.gather(*tasks.values(), return_exceptions=True)
                raise
            return dict(zip(tasks, values))

        outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)
        results: dict[str, Any] = {}
        failures: dict[str, BaseException] = {}
        for key, outcome in zip(tasks, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                log.debug("parallel stage failed", stage=key, error=str(outcome))
                failures[key] = outcome
            else:
                results[key] = outcome

        if failures:
            raise ParallelError(failures, results)
        return results

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}: {v!r}" for k, v in self._stages.items())
        return f"{{{inner}}}"


# ═════════════════════════════════════════════════════════════════════════════
# Factory Functions
# ═════════════════════════════════════════════════════════════════════════════


def parallel(
    stages: Mapping[str, Any] | None = None,
    /,
    *,
    fail_fast: bool | None = None,
    max_concurrency: int | None = None,
    **kwstages: Any,
) -> RunnableParallel[Any]:
    """Create a parallel composition from a stage mapping and/or keyword stages.

    Args:
        stages: Mapping of output key → stage
        fail_fast: Re-raise the first failure (default from settings)
        max_concurrency: Bound on concurrently awaited stages in async mode
        **kwstages: Additional stages by keyword

    Returns:
        RunnableParallel instance
    """
    return RunnableParallel(stages, fail_fast=fail_fast, max_concurrency=max_concurrency, **kwstages)


def run_parallel(
    stages: Mapping[str, Any],
    input: Any,
    *,
    fail_fast: bool | None = None,
) -> dict[str, Any]:
    """Invoke every stage on `input` and return the keyed results.

    The output has exactly the keys of `stages`; each value is the
    corresponding stage applied to the shared input.
    """
    return RunnableParallel(stages, fail_fast=fail_fast).invoke(input)


async def arun_parallel(
    stages: Mapping[str, Any],
    input: Any,
    *,
    fail_fast: bool | None = None,
    max_concurrency: int | None = None,
) -> dict[str, Any]:
    """Async run_parallel: stages are awaited concurrently."""
    return await RunnableParallel(stages, fail_fast=fail_fast, max_concurrency=max_concurrency).ainvoke(input)
