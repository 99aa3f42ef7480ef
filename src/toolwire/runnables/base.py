"""Runnable protocol: the unit of composition.

Everything that takes one input and produces one output is a Runnable:
tools, chat models, prompt templates, parsers, retrievers and the
compositions built from them.

Sequential: prompt | model | parser
Parallel: {"context": retriever, "question": RunnablePassthrough()}
"""

from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from toolwire.observability import get_logger

if TYPE_CHECKING:
    from collections.abc import Coroutine

Input = TypeVar("Input")
Output = TypeVar("Output")
T = TypeVar("T")

log = get_logger("toolwire.runnables")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from sync code.

    Handles edge cases:
    - Running inside an existing event loop (e.g., a notebook kernel)
    - Running in a sync context with no loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    # Inside a running loop - use a worker thread with its own loop
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


class Runnable(ABC, Generic[Input, Output]):
    """A unit of work that can be invoked, batched and composed.

    Subclasses implement `invoke`. The async and batch variants have
    default implementations in terms of it; override `ainvoke` for native
    async work.

    Example:
        >>> add_one = RunnableLambda(lambda x: x + 1)
        >>> double = RunnableLambda(lambda x: x * 2)
        >>> (add_one | double).invoke(3)
        8
    """

    name: str | None = None

    def get_name(self) -> str:
        return self.name or type(self).__name__

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    @abstractmethod
    def invoke(self, input: Input) -> Output:
        """Transform a single input into an output."""
        ...

    async def ainvoke(self, input: Input) -> Output:
        """Async invoke. Default runs `invoke` in a worker thread."""
        return await asyncio.to_thread(self.invoke, input)

    def batch(self, inputs: Sequence[Input]) -> list[Output]:
        """Invoke on each input in order."""
        return [self.invoke(i) for i in inputs]

    async def abatch(self, inputs: Sequence[Input], *, max_concurrency: int | None = None) -> list[Output]:
        """Invoke on each input concurrently, results in input order."""
        if max_concurrency is None:
            return list(await asyncio.gather(*(self.ainvoke(i) for i in inputs)))

        sem = asyncio.Semaphore(max_concurrency)

        async def bounded(i: Input) -> Output:
            async with sem:
                return await self.ainvoke(i)

        return list(await asyncio.gather(*(bounded(i) for i in inputs)))

    # ─────────────────────────────────────────────────────────────────
    # Composition
    # ─────────────────────────────────────────────────────────────────

    def pipe(self, *others: Any) -> RunnableSequence[Input, Any]:
        """Chain runnables: self.pipe(a, b) == self | a | b."""
        return RunnableSequence(self, *(coerce_runnable(o) for o in others))

    def __or__(self, other: Any) -> RunnableSequence[Input, Any]:
        """Chain: self | other. `other` may be a runnable, callable or mapping."""
        return RunnableSequence(self, coerce_runnable(other))

    def __ror__(self, other: Any) -> RunnableSequence[Any, Output]:
        """Chain with a plain callable or mapping on the left: other | self."""
        return RunnableSequence(coerce_runnable(other), self)

    def assign(self, **stages: Any) -> RunnableSequence[Input, dict[str, Any]]:
        """Pipe into RunnablePassthrough.assign(**stages)."""
        from .passthrough import RunnableAssign
        return self | RunnableAssign(stages)

    def pick(self, keys: str | list[str]) -> RunnableSequence[Input, Any]:
        """Pipe into a RunnablePick selecting `keys` from the output mapping."""
        from .passthrough import RunnablePick
        return self | RunnablePick(keys)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ═════════════════════════════════════════════════════════════════════════════
# RunnableLambda: wrap a plain function
# ═════════════════════════════════════════════════════════════════════════════


class RunnableLambda(Runnable[Input, Output]):
    """Runnable wrapping a unary sync or async function.

    Example:
        >>> RunnableLambda(lambda v: v["num"] + 1).invoke({"num": 1})
        2
    """

    __slots__ = ("_func", "_is_async")

    def __init__(
        self,
        func: Callable[[Input], Output] | Callable[[Input], Awaitable[Output]],
        *,
        name: str | None = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"RunnableLambda expects a callable, got {type(func).__name__}")
        self._func = func
        self._is_async = inspect.iscoroutinefunction(func)
        self.name = name or getattr(func, "__name__", None)

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    def invoke(self, input: Input) -> Output:
        if self._is_async:
            return run_sync(self._func(input))  # type: ignore[arg-type]
        return cast(Output, self._func(input))

    async def ainvoke(self, input: Input) -> Output:
        if self._is_async:
            return await self._func(input)  # type: ignore[misc]
        return await asyncio.to_thread(self._func, input)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"RunnableLambda({self.name or '<lambda>'})"


# ═════════════════════════════════════════════════════════════════════════════
# RunnableSequence: sequential composition
# ═════════════════════════════════════════════════════════════════════════════


class RunnableSequence(Runnable[Input, Output]):
    """Sequential composition: each step's output is the next step's input.

    Nested sequences are flattened, so (a | b) | c has three steps.
    Errors propagate from the failing step unchanged.
    """

    __slots__ = ("_steps",)

    def __init__(self, *steps: Any) -> None:
        flat: list[Runnable[Any, Any]] = []
        for step in steps:
            step = coerce_runnable(step)
            flat.extend(step.steps if isinstance(step, RunnableSequence) else [step])
        if len(flat) < 2:
            raise ValueError("Sequence requires at least two steps")
        self._steps = flat

    @property
    def steps(self) -> list[Runnable[Any, Any]]:
        return list(self._steps)

    @property
    def first(self) -> Runnable[Input, Any]:
        return self._steps[0]

    @property
    def last(self) -> Runnable[Any, Output]:
        return self._steps[-1]

    def invoke(self, input: Input) -> Output:
        value: Any = input
        for i, step in enumerate(self._steps):
            log.debug("sequence step", step=i, runnable=step.get_name())
            value = step.invoke(value)
        return cast(Output, value)

    async def ainvoke(self, input: Input) -> Output:
        value: Any = input
        for i, step in enumerate(self._steps):
            log.debug("sequence step", step=i, runnable=step.get_name())
            value = await step.ainvoke(value)
        return cast(Output, value)

    def __or__(self, other: Any) -> RunnableSequence[Input, Any]:
        return RunnableSequence(*self._steps, coerce_runnable(other))

    def __ror__(self, other: Any) -> RunnableSequence[Any, Output]:
        return RunnableSequence(coerce_runnable(other), *self._steps)

    def __repr__(self) -> str:
        return " | ".join(repr(s) for s in self._steps)


# ═════════════════════════════════════════════════════════════════════════════
# Coercion
# ═════════════════════════════════════════════════════════════════════════════


def coerce_runnable(obj: Any) -> Runnable[Any, Any]:
    """Turn a runnable-like object into a Runnable.

    - Runnables pass through unchanged
    - Mappings become RunnableParallel (each value coerced in turn)
    - Callables become RunnableLambda
    """
    if isinstance(obj, Runnable):
        return obj
    if isinstance(obj, Mapping):
        from .parallel import RunnableParallel
        return RunnableParallel(obj)
    if callable(obj):
        return RunnableLambda(obj)
    raise TypeError(f"Expected a Runnable, callable or mapping, got {type(obj).__name__}")


def pipeline(*steps: Any) -> RunnableSequence[Any, Any]:
    """Create a sequential composition: pipeline(a, b, c) == a | b | c.

    Example:
        >>> chain = pipeline(prompt, model.bind_tools([get_weather]), ToolCallsParser())
    """
    if len(steps) < 2:
        raise ValueError("pipeline() requires at least two steps")
    return RunnableSequence(*steps)
