"""
Guardian - Async Utilities
==========================

Helpers that keep background work and fan-out calls from failing silently.

Usage:
    from guardian.utils.async_utils import create_safe_task, gather_with_logging

    create_safe_task(self._unmute_later(member, role), "GIF Guard Unmute")

    await gather_with_logging(
        ("Tag Joiner", add_role(a)),
        ("Tag Joiner", add_role(b)),
        context="Raid Lockdown",
    )
"""

import asyncio
from typing import Any, Coroutine, List, Optional, Tuple

from guardian.core.logger import logger


async def gather_with_logging(
    *operations: Tuple[str, Coroutine[Any, Any, Any]],
    context: Optional[str] = None,
) -> List[Any]:
    """
    Run multiple async operations concurrently with error logging.

    Args:
        *operations: Tuples of (operation_name, coroutine).
        context: Optional context string for error logs (e.g., "Raid Lockdown").

    Returns:
        List of results (exceptions included as values, not raised).
    """
    names = [name for name, _ in operations]
    coros = [coro for _, coro in operations]

    results = await asyncio.gather(*coros, return_exceptions=True)

    for i, result in enumerate(results):
        if isinstance(result, Exception):
            error_details = [
                ("Operation", names[i]),
                ("Error Type", type(result).__name__),
                ("Error", str(result)[:100]),
            ]
            if context:
                error_details.insert(0, ("Context", context))
            logger.warning("Async Operation Failed", error_details)

    return results


async def safe_async_operation(
    name: str,
    coro: Coroutine[Any, Any, Any],
    default: Any = None,
) -> Any:
    """
    Run a single detector step, logging and absorbing any failure.

    Used at the event-handler boundary so one detector's error never
    prevents the others from running.
    """
    try:
        return await coro
    except Exception as e:
        logger.error("Detector Failed", [
            ("Detector", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:200]),
        ])
        return default


# =============================================================================
# Safe Background Tasks
# =============================================================================

def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Unlike raw asyncio.create_task(), exceptions are logged instead of
    disappearing with the task.

    Args:
        coro: The coroutine to run as a background task.
        name: Name for logging purposes.
    """
    async def wrapped():
        try:
            await coro
        except asyncio.CancelledError:
            # Expected during shutdown
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(wrapped())


__all__ = [
    "gather_with_logging",
    "safe_async_operation",
    "create_safe_task",
]
