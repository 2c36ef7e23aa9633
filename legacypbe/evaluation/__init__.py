"""Randomized self-checks for the PBE codec (roundtrip and tamper sensitivity)."""

from .roundtrip import (
    RoundtripFailure,
    RoundtripResult,
    TamperResult,
    run_roundtrip_tests,
    run_tamper_tests,
    run_all_families,
)

__all__ = [
    "RoundtripFailure",
    "RoundtripResult",
    "TamperResult",
    "run_roundtrip_tests",
    "run_tamper_tests",
    "run_all_families",
]
