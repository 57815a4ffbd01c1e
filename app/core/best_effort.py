from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

import anyio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BestEffortOutcome:
    action: str
    ok: bool
    value: Any = None
    error: Exception | None = None


async def run_best_effort(action: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> BestEffortOutcome:
    """Run a blocking side effect in a worker thread and never raise.

    Failures are logged and returned as a failed outcome so the primary
    operation can carry on.
    """
    try:
        value = await anyio.to_thread.run_sync(partial(func, *args, **kwargs))
    except Exception as exc:
        logger.warning("Best-effort action failed: action=%s error=%r", action, exc)
        return BestEffortOutcome(action=action, ok=False, error=exc)
    return BestEffortOutcome(action=action, ok=True, value=value)
