"""Test utilities for code built on tokenmigration."""

from tokenmigration.testing.harness import GENESIS, LedgerHarness, LedgerSnapshot, SteppingClock

__all__ = ["GENESIS", "LedgerHarness", "LedgerSnapshot", "SteppingClock"]
