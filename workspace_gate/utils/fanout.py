"""Concurrent fan-out that degrades failed branches to placeholders."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P")


async def gather_settled(
    awaitables: Iterable[Awaitable[T]],
    placeholder: Callable[[BaseException], P],
) -> list[T | P]:
    """Run awaitables concurrently and join on all of them.

    A failing branch never aborts its siblings: its slot in the result is
    replaced by ``placeholder(exc)``. Result order matches input order.

    Args:
        awaitables: The independent remote calls to issue
        placeholder: Builds the inline error value for a failed slot

    Returns:
        One entry per awaitable, either its result or a placeholder
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)

    settled: list[T | P] = []
    for index, result in enumerate(results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning(f"Fan-out branch {index} failed: {result}")
            settled.append(placeholder(result))
        else:
            settled.append(result)
    return settled
