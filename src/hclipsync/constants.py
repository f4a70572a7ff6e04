#!/usr/bin/env python3
"""Timing constants for the sync scheduler and push retry.

Poll intervals are in seconds and bound the user-configured interval.
"""

# Bounds of the configured poll interval in seconds.
MIN_INTERVAL: int = 1
MAX_INTERVAL: int = 60

# Poll interval used when nothing (or garbage) is configured.
DEFAULT_INTERVAL: int = 3

# Poll interval while the device is in power-save mode.
POWER_SAVE_INTERVAL: int = 60

# Delay before the next tick after a failed pull cycle.
RECOVERY_DELAY: float = 5.0

# Push retry parameters for exponential backoff on transient failures.
PUSH_ATTEMPTS: int = 3
PUSH_INITIAL_WAIT: float = 1.0
PUSH_MAX_WAIT: float = 4.0
PUSH_WAIT_MULTIPLIER: float = 1.0

# Poll period of the desktop clipboard host.
HOST_POLL_INTERVAL: float = 0.5
