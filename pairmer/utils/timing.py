"""
Elapsed-time reporting for per-unit progress messages.
"""

import time


def format_elapsed(seconds: float) -> str:
    """
    Human-readable duration.
    
    Example:
        >>> format_elapsed(1.5)
        '1.50 seconds'
        >>> format_elapsed(3723)
        '1h 2m 3s'
    """
    if seconds < 60:
        return f"{seconds:.2f} second{'' if seconds == 1 else 's'}"
    
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return ' '.join(parts)


class Timer:
    """Wall-clock timer started at construction."""
    
    def __init__(self):
        self.start = time.perf_counter()
    
    def elapsed(self) -> float:
        return time.perf_counter() - self.start
    
    def __str__(self) -> str:
        return format_elapsed(self.elapsed())
