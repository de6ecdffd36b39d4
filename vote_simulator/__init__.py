"""
Votifier load simulator.

Drives encrypted vote submissions against a remote listener with bounded
concurrency and an optional fixed issue rate, counting every attempt as a
success or a failure.
"""

from .main import main

__all__ = ["main"]
