"""Sampling decisions applied at trace roots."""

from tracehop.processors.sampler import (
    MAX_SAMPLE_RATE,
    SampleSource,
    Sampler,
    SamplingResult,
    TraceMode,
    should_sample,
    validate_sample_rate,
)

__all__ = [
    "MAX_SAMPLE_RATE",
    "TraceMode",
    "SampleSource",
    "Sampler",
    "SamplingResult",
    "should_sample",
    "validate_sample_rate",
]
