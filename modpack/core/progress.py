# modpack/core/progress.py
from __future__ import annotations
import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["ProgressCallback", "CountProgress", "FractionProgress", "reportProgress"]

T = TypeVar("T")

# (current, total, message)
CountProgress = Callable[[tuple[int, int, str]], None]
# pagesDone / pagesTotal
FractionProgress = Callable[[float], None]
ProgressCallback = Callable[[T], None]



def reportProgress(progress: ProgressCallback[T] | None, value: T) -> None:
    """
    Fire-and-forget progress notification.

    A missing listener is fine. A listener that raises is logged and otherwise ignored,
    progress must never abort a build or an install.
    """
    if progress is None:
        return
    try:
        progress(value)
    except Exception:
        logger.debug("Progress listener raised while reporting %r", value, exc_info=True)
