"""Composition of runnables.

Sequential: a | b | c
Parallel: {"passed": RunnablePassthrough(), "modified": lambda v: v["num"] + 1}

Example:
    >>> from toolwire.runnables import RunnableParallel, RunnablePassthrough
    >>>
    >>> chain = RunnableParallel(
    ...     passed=RunnablePassthrough(),
    ...     modified=lambda v: v["num"] + 1,
    ... )
    >>> chain.invoke({"num": 1})
    {'passed': {'num': 1}, 'modified': 2}
"""

from .base import Runnable, RunnableLambda, RunnableSequence, coerce_runnable, pipeline, run_sync
from .parallel import RunnableParallel, arun_parallel, parallel, run_parallel
from .passthrough import RunnableAssign, RunnablePassthrough, RunnablePick

__all__ = [
    # Core
    "Runnable",
    "RunnableLambda",
    "RunnableSequence",
    "coerce_runnable",
    "run_sync",
    # Parallel
    "RunnableParallel",
    "parallel",
    "run_parallel",
    "arun_parallel",
    # Pass-through
    "RunnablePassthrough",
    "RunnableAssign",
    "RunnablePick",
    # Factories
    "pipeline",
]
