#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Exception types raised by the pipeline.

Every fatal condition derives from PairmerError so the CLI can report it
with a single handler. A malformed count line is dropped during decoding,
but a query output whose length does not match the k-mer file is fatal.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

from typing import Optional, Sequence


class PairmerError(Exception):
    """Base class for all pipeline failures."""
    pass


class ConfigurationError(PairmerError):
    """Raised when inputs or settings are invalid before any stage runs."""
    pass


class PreconditionError(PairmerError):
    """Raised when a stage finds its upstream artifacts incomplete."""
    pass


class SamplingError(PairmerError):
    """Raised when subsampling cannot collect enough distinct ids."""
    pass


class ExternalProcessError(PairmerError):
    """
    Raised when an engine invocation fails.
    
    Attributes:
        cmd: Command line that was executed
        returncode: Exit status (None if the executable could not be started)
        stderr: Captured standard error, if any
    """
    
    def __init__(self, cmd: Sequence[str], returncode: Optional[int] = None,
                 stderr: str = ''):
        self.cmd = [str(c) for c in cmd]
        self.returncode = returncode
        self.stderr = stderr or ''
        
        if returncode is None:
            message = f"Failed to execute {' '.join(self.cmd)}"
        else:
            message = f"Failed to execute {' '.join(self.cmd)} (exit status {returncode})"
        if self.stderr.strip():
            message += f": {self.stderr.strip()}"
        super().__init__(message)


class QueryOutputError(PairmerError):
    """
    Raised when a query output is not aligned with its k-mer file.
    
    Attributes:
        expected: Number of k-mers in the location manifest
        observed: Number of lines in the query output
    """
    
    def __init__(self, expected: int, observed: int, source: str = ''):
        self.expected = expected
        self.observed = observed
        message = f"query output has {observed} lines for {expected} k-mers"
        if source:
            message = f"{source}: {message}"
        super().__init__(message)

# Pairmer v0.1.0
# Any usage is subject to this software's license.
