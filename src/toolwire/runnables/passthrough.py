"""Pass-through stages: forward input unchanged, extend it, or pick from it."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from .base import Runnable
from .parallel import RunnableParallel

Input = TypeVar("Input")


class RunnablePassthrough(Runnable[Input, Input]):
    """Identity stage: returns its input unchanged.

    An optional `func` observes the input (for logging, collection, ...);
    its return value is ignored.

    Example:
        >>> RunnableParallel(passed=RunnablePassthrough(), modified=lambda v: v["num"] + 1).invoke({"num": 1})
        {'passed': {'num': 1}, 'modified': 2}
    """

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[Input], Any] | None = None) -> None:
        self._func = func

    def invoke(self, input: Input) -> Input:
        if self._func is not None:
            self._func(input)
        return input

    async def ainvoke(self, input: Input) -> Input:
        return self.invoke(input)

    @classmethod
    def assign(cls, **stages: Any) -> RunnableAssign:  # type: ignore[override]
        """Pass the input mapping through, adding one key per stage.

        Example:
            >>> RunnablePassthrough.assign(mult=lambda v: v["num"] * 3).invoke({"num": 1})
            {'num': 1, 'mult': 3}
        """
        return RunnableAssign(stages)


class RunnableAssign(Runnable[Mapping[str, Any], dict[str, Any]]):
    """Merge the results of parallel stages into a copy of the input mapping.

    Stage results override input keys of the same name.
    """

    __slots__ = ("_mapper",)

    def __init__(self, stages: Mapping[str, Any] | RunnableParallel[Any]) -> None:
        self._mapper = stages if isinstance(stages, RunnableParallel) else RunnableParallel(stages)

    @property
    def mapper(self) -> RunnableParallel[Any]:
        return self._mapper

    @staticmethod
    def _check(input: object) -> Mapping[str, Any]:
        if not isinstance(input, Mapping):
            raise TypeError(f"assign() expects a mapping input, got {type(input).__name__}")
        return input

    def invoke(self, input: Mapping[str, Any]) -> dict[str, Any]:
        return {**self._check(input), **self._mapper.invoke(input)}

    async def ainvoke(self, input: Mapping[str, Any]) -> dict[str, Any]:
        return {**self._check(input), **await self._mapper.ainvoke(input)}

    def __repr__(self) -> str:
        return f"assign({self._mapper!r})"


class RunnablePick(Runnable[Mapping[str, Any], Any]):
    """Select keys from a mapping input.

    A single key returns its value; a list of keys returns a dict with just
    those keys. Missing keys raise KeyError.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: str | list[str]) -> None:
        if not keys:
            raise ValueError("pick() requires at least one key")
        self._keys = keys

    def invoke(self, input: Mapping[str, Any]) -> Any:
        if isinstance(self._keys, str):
            return input[self._keys]
        return {k: input[k] for k in self._keys}

    async def ainvoke(self, input: Mapping[str, Any]) -> Any:
        return self.invoke(input)

    def __repr__(self) -> str:
        return f"pick({self._keys!r})"

