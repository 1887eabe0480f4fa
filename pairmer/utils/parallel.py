"""
Bounded parallel execution of independent work units.

Units within a stage share nothing but read-only configuration and write
to distinct paths, so they can run on a thread pool. Most of the wall time
of a unit is spent waiting on jellyfish or on file I/O.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Hashable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Hashable)
R = TypeVar('R')


def run_units(func: Callable[[T], R], units: Sequence[T], workers: int = 1) -> Dict[T, R]:
    """
    Run ``func`` over every unit, at most ``workers`` at a time.
    
    The first failure is fatal: pending units are cancelled and the
    exception propagates to the caller.
    
    Args:
        func: Callable applied to each unit
        units: Work units (sample names or pairs)
        workers: Maximum concurrent units
    
    Returns:
        Mapping of unit to result
    """
    results: Dict[T, R] = {}
    
    if workers <= 1 or len(units) <= 1:
        for unit in units:
            results[unit] = func(unit)
        return results
    
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = {executor.submit(func, unit): unit for unit in units}
        for future in as_completed(futures):
            results[futures[future]] = future.result()
    except BaseException:
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    executor.shutdown(wait=True)
    
    return results
