"""Wall-clock timing of jax functions."""

import logging
import timeit
from typing import Callable

import jax
import numpy as np
from pydantic import BaseModel, NonNegativeFloat, PositiveInt

logger = logging.getLogger("sirbench")


class TimingStatistics(BaseModel):
    """Seconds per call over `repeat` timing runs of `number` calls each."""

    number: PositiveInt
    repeat: PositiveInt
    min: NonNegativeFloat
    median: NonNegativeFloat
    mean: NonNegativeFloat
    std: NonNegativeFloat
    max: NonNegativeFloat


def benchmark(
    func: Callable,
    *args,
    number: int = 1,
    repeat: int = 10,
    **kwargs,
) -> TimingStatistics:
    """Time `func(*args, **kwargs)` with `timeit.Timer`.

    `func` is called once before timing so that jit compilation is not
    counted, and every timed call blocks until its jax outputs are ready.

    Parameters
    ----------
    func : Callable
        function to time, its return value is discarded.
    number : int, optional
        calls per timing run, by default 1.
    repeat : int, optional
        number of timing runs, by default 10.

    Returns
    -------
    TimingStatistics
        summary of the seconds taken per call.
    """
    if number < 1 or repeat < 1:
        raise ValueError(
            f"number and repeat must be positive, got {number} and {repeat}"
        )

    def _call():
        return jax.block_until_ready(func(*args, **kwargs))

    # warm up, compiles anything jitted inside func
    _call()
    runs = np.array(timeit.Timer(_call).repeat(repeat=repeat, number=number))
    per_call = runs / number
    name = getattr(func, "__name__", repr(func))
    logger.info(
        "%s: median %.4fs per call over %s runs",
        name,
        np.median(per_call),
        repeat,
    )
    return TimingStatistics(
        number=number,
        repeat=repeat,
        min=float(np.min(per_call)),
        median=float(np.median(per_call)),
        mean=float(np.mean(per_call)),
        std=float(np.std(per_call)),
        max=float(np.max(per_call)),
    )
