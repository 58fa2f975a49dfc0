"""
Wall-clock timing for long-running steps such as network training.
"""
import logging
import time
from typing import Optional
from .logging_utils import get_logger

logger = get_logger(__name__)


class Timer:
    """
    Context manager that measures a block and logs the duration.

    Usage:
        with Timer("network training") as t:
            losses = network.train(epochs)
        t.elapsed_ms

    The duration is logged as completed, or as aborted when the block
    raised. The exception itself always propagates.
    """

    def __init__(self, name: Optional[str] = None, log: bool = True, level: int = logging.INFO):
        self.name = name or "operation"
        self.log = log
        self.level = level
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    @property
    def elapsed_ms(self) -> Optional[float]:
        return None if self.elapsed is None else self.elapsed * 1000

    def __enter__(self) -> 'Timer':
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        if not self.log:
            return
        if exc_type is None:
            logger.log(self.level, f"{self.name} completed in {self.elapsed:.4f} seconds")
        else:
            logger.log(self.level, f"{self.name} aborted after {self.elapsed:.4f} seconds ({exc_type.__name__})")
