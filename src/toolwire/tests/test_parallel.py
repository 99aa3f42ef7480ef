"""Tests for parallel composition.

Covers keyed result collection, the identity stage, fail-fast versus
collected failures, and concurrent async evaluation.
"""

from __future__ import annotations

import asyncio
import time

import pytest

from toolwire import (
    ParallelError,
    RunnableLambda,
    RunnableParallel,
    RunnablePassthrough,
    arun_parallel,
    parallel,
    run_parallel,
)
from toolwire.foundation.config import clear_settings_cache


def _boom(_: object) -> None:
    raise RuntimeError("stage exploded")


# ─────────────────────────────────────────────────────────────────────────────
# Result Collection
# ─────────────────────────────────────────────────────────────────────────────


class TestRunParallel:
    """Keyed collection of stage results."""

    def test_passthrough_and_modified(self) -> None:
        """Identity and transform stages over {"num": 1}."""
        stages = {"passed": RunnablePassthrough(), "modified": lambda v: v["num"] + 1}
        assert run_parallel(stages, {"num": 1}) == {"passed": {"num": 1}, "modified": 2}

    def test_identity_and_function(self) -> None:
        """{k1: identity, k2: f}(x) == {k1: x, k2: f(x)}."""
        f = lambda x: x * 10  # noqa: E731
        for x in (0, 3, -7):
            assert run_parallel({"k1": RunnablePassthrough(), "k2": f}, x) == {"k1": x, "k2": f(x)}

    def test_identity_returns_equal_value_every_call(self) -> None:
        """Identity stage yields a value equal to the input on every call."""
        chain = RunnableParallel(same=RunnablePassthrough())
        payload = {"nested": [1, 2, {"a": "b"}]}
        for _ in range(3):
            assert chain.invoke(payload)["same"] == payload

    @pytest.mark.parametrize("keys", [["a"], ["a", "b"], ["z", "y", "x", "w"]])
    def test_output_keys_match_stage_keys(self, keys: list[str]) -> None:
        """Output key set equals stage key set, in caller order."""
        stages = {k: RunnableLambda(lambda v, k=k: f"{k}:{v}") for k in keys}
        out = RunnableParallel(stages).invoke("in")
        assert list(out) == keys
        assert out == {k: f"{k}:in" for k in keys}

    def test_every_stage_gets_same_input(self) -> None:
        """Each stage observes the identical input object."""
        seen: list[object] = []
        payload = {"num": 1}
        RunnableParallel(a=RunnablePassthrough(seen.append), b=RunnablePassthrough(seen.append)).invoke(payload)
        assert seen == [payload, payload]
        assert all(s is payload for s in seen)

    def test_sync_invoke_runs_in_key_order(self) -> None:
        """Sync evaluation follows the mapping order."""
        order: list[str] = []
        stages = {k: RunnableLambda(lambda v, k=k: order.append(k)) for k in ("third", "first", "second")}
        RunnableParallel(stages).invoke(None)
        assert order == ["third", "first", "second"]

    def test_empty_mapping_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least one stage"):
            RunnableParallel({})
        with pytest.raises(ValueError):
            run_parallel({}, 1)

    def test_invalid_max_concurrency_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_concurrency"):
            RunnableParallel(a=RunnablePassthrough(), max_concurrency=0)

    def test_nested_mapping_becomes_nested_parallel(self) -> None:
        out = run_parallel({"outer": {"inner": lambda v: v + 1}, "raw": RunnablePassthrough()}, 1)
        assert out == {"outer": {"inner": 2}, "raw": 1}

    def test_mapping_and_keyword_stages_merge(self) -> None:
        chain = parallel({"a": RunnablePassthrough()}, b=lambda v: -v)
        assert chain.invoke(4) == {"a": 4, "b": -4}

    def test_composes_with_pipe(self) -> None:
        """A plain dict on the left of | becomes a parallel stage."""
        chain = {"x": RunnablePassthrough(), "y": lambda v: v * 2} | RunnableLambda(lambda d: d["x"] + d["y"])
        assert chain.invoke(5) == 15


# ─────────────────────────────────────────────────────────────────────────────
# Failure Policy
# ─────────────────────────────────────────────────────────────────────────────


class TestFailurePolicy:
    """fail_fast re-raises; collect mode reports per-key failures."""

    def test_fail_fast_reraises_original(self) -> None:
        with pytest.raises(RuntimeError, match="stage exploded"):
            run_parallel({"ok": RunnablePassthrough(), "bad": _boom}, 1)

    def test_fail_fast_stops_later_stages_in_sync_mode(self) -> None:
        calls: list[str] = []
        stages = {"bad": _boom, "later": RunnablePassthrough(lambda _: calls.append("later"))}
        with pytest.raises(RuntimeError):
            RunnableParallel(stages).invoke(1)
        assert calls == []

    def test_collect_mode_raises_parallel_error(self) -> None:
        stages = {"ok": RunnablePassthrough(), "bad": _boom, "also_ok": lambda v: v + 1}
        with pytest.raises(ParallelError) as info:
            run_parallel(stages, 1, fail_fast=False)
        err = info.value
        assert set(err.failures) == {"bad"}
        assert isinstance(err.failures["bad"], RuntimeError)
        assert err.partial == {"ok": 1, "also_ok": 2}

    def test_collect_mode_success_returns_results(self) -> None:
        assert run_parallel({"a": lambda v: v}, 1, fail_fast=False) == {"a": 1}

    def test_fail_fast_default_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLWIRE_PARALLEL_FAIL_FAST", "false")
        clear_settings_cache()
        assert RunnableParallel(a=RunnablePassthrough()).fail_fast is False
        with pytest.raises(ParallelError):
            run_parallel({"bad": _boom}, 1)

    def test_explicit_argument_overrides_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLWIRE_PARALLEL_FAIL_FAST", "false")
        clear_settings_cache()
        with pytest.raises(RuntimeError):
            run_parallel({"bad": _boom}, 1, fail_fast=True)


# ─────────────────────────────────────────────────────────────────────────────
# Async Evaluation
# ─────────────────────────────────────────────────────────────────────────────


class TestAsyncParallel:
    """Concurrent evaluation via ainvoke."""

    @pytest.mark.asyncio
    async def test_ainvoke_matches_invoke(self) -> None:
        stages = {"passed": RunnablePassthrough(), "modified": lambda v: v["num"] + 1}
        assert await RunnableParallel(stages).ainvoke({"num": 1}) == RunnableParallel(stages).invoke({"num": 1})

    @pytest.mark.asyncio
    async def test_stages_run_concurrently(self) -> None:
        async def slow(v: int) -> int:
            await asyncio.sleep(0.1)
            return v

        start = time.perf_counter()
        out = await arun_parallel({f"s{i}": slow for i in range(5)}, 7)
        elapsed = time.perf_counter() - start

        assert out == {f"s{i}": 7 for i in range(5)}
        assert elapsed < 0.4

    @pytest.mark.asyncio
    async def test_max_concurrency_bounds_in_flight_stages(self) -> None:
        active = 0
        peak = 0

        async def tracked(v: int) -> int:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.02)
            active -= 1
            return v

        out = await arun_parallel({f"s{i}": tracked for i in range(6)}, 1, max_concurrency=2)
        assert len(out) == 6
        assert peak <= 2

    @pytest.mark.asyncio
    async def test_result_order_follows_keys_not_completion(self) -> None:
        def delayed(delay: float):
            async def run(_: object) -> float:
                await asyncio.sleep(delay)
                return delay
            return run

        stages = {"slow": delayed(0.05), "fast": delayed(0.0)}
        out = await RunnableParallel(stages).ainvoke(None)
        assert list(out) == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_fail_fast_cancels_running_stages(self) -> None:
        cancelled = asyncio.Event()

        async def hangs(_: object) -> None:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def fails(_: object) -> None:
            await asyncio.sleep(0.01)
            raise RuntimeError("stage exploded")

        with pytest.raises(RuntimeError, match="stage exploded"):
            await RunnableParallel(hang=hangs, fail=fails).ainvoke(None)
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_collect_mode_waits_for_all(self) -> None:
        async def fails(_: object) -> None:
            raise ValueError("nope")

        async def slow_ok(v: int) -> int:
            await asyncio.sleep(0.02)
            return v

        with pytest.raises(ParallelError) as info:
            await arun_parallel({"bad": fails, "good": slow_ok}, 3, fail_fast=False)
        assert set(info.value.failures) == {"bad"}
        assert info.value.partial == {"good": 3}
