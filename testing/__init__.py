"""
Testing module for location comparison.

Contains sample inputs and the pytest suites for each layer.
"""

from testing.sample_inputs import (
    SAMPLE_PROJECT_ID,
    SAMPLE_REQUIREMENT_ID,
    SAMPLE_USER_ID,
)

__all__ = [
    "SAMPLE_PROJECT_ID",
    "SAMPLE_REQUIREMENT_ID",
    "SAMPLE_USER_ID",
]
