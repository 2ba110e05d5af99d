# -*- coding: utf-8 -*-
"""
tests.property package bootstrap.

Shared configuration for property-based tests (Hypothesis).

What this does on import:
- Registers named Hypothesis profiles (dev/ci/fast).
- Selects the active profile using HYPOTHESIS_PROFILE, otherwise "ci" on CI
  (CI env var present/truthy) and "dev" locally.
- Re-exports common Hypothesis imports (given, strategies as st).

Usage in tests:
    from . import given, st

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast
- CI=true (auto-pick the 'ci' profile if HYPOTHESIS_PROFILE not set)
"""
from __future__ import annotations

import os
from typing import Final

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

# ---- profile registry --------------------------------------------------------

# Deadlines off: the vault tests run many host calls per example.
settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=300,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow,),
        derandomize=True,
    ),
)
settings.register_profile("fast", settings(max_examples=20, deadline=None))


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)


def active_profile() -> str:
    """Return the name of the active Hypothesis profile."""
    return _active


__all__ = ["st", "given", "active_profile"]
