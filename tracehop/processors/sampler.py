"""Sampling decisions for traces."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from tracehop import runtime_config

MAX_SAMPLE_RATE = 1_000_000


class TraceMode(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    THROUGH = "through"


class SampleSource(str, Enum):
    MODE = "mode"
    RATE = "rate"
    CONTINUED = "continued"


@dataclass(frozen=True)
class SamplingResult:
    sampled: bool
    source: SampleSource


def validate_sample_rate(rate: int) -> int:
    if isinstance(rate, bool) or not isinstance(rate, int):
        raise ValueError("sample_rate must be an integer")
    if not 0 <= rate <= MAX_SAMPLE_RATE:
        raise ValueError(f"sample_rate must be between 0 and {MAX_SAMPLE_RATE}")
    return rate


def should_sample(
    mode: Union[TraceMode, str],
    rate: int,
    inbound_sampled: Optional[bool] = None,
    malformed_inbound: bool = False,
) -> SamplingResult:
    """
    Decide whether a new trace (or a continued remote trace) is sampled.

    Args:
        mode: Trace mode (never, always, through)
        rate: Configured rate out of ``MAX_SAMPLE_RATE``
        inbound_sampled: Sampled flag of a valid inbound X-Trace header,
            or None when there is no usable header
        malformed_inbound: True when a header was present but failed to decode

    Returns:
        SamplingResult with the decision and where it came from
    """
    mode = TraceMode(mode)
    if mode is TraceMode.NEVER:
        return SamplingResult(sampled=False, source=SampleSource.MODE)
    if mode is TraceMode.ALWAYS:
        return SamplingResult(sampled=True, source=SampleSource.MODE)

    if inbound_sampled is not None:
        return SamplingResult(sampled=bool(inbound_sampled), source=SampleSource.CONTINUED)

    # through mode never starts traces of its own; an unreadable header is
    # treated as no continuation and falls back to the configured rate.
    if not malformed_inbound:
        return SamplingResult(sampled=False, source=SampleSource.MODE)

    return SamplingResult(
        sampled=random.random() * MAX_SAMPLE_RATE < rate,
        source=SampleSource.RATE,
    )


class Sampler:
    """Head-based sampler; consulted once per trace at its root event."""

    def __init__(
        self,
        trace_mode: Optional[Union[TraceMode, str]] = None,
        sample_rate: Optional[int] = None,
    ) -> None:
        self.trace_mode = TraceMode(trace_mode) if trace_mode is not None else None
        self.sample_rate = validate_sample_rate(sample_rate) if sample_rate is not None else None

    def get_trace_mode(self) -> TraceMode:
        if self.trace_mode is not None:
            return self.trace_mode
        return TraceMode(runtime_config.get_trace_mode())

    def get_sample_rate(self) -> int:
        if self.sample_rate is not None:
            return self.sample_rate
        return runtime_config.get_sample_rate()

    def should_sample(
        self,
        inbound_sampled: Optional[bool] = None,
        malformed_inbound: bool = False,
    ) -> SamplingResult:
        return should_sample(
            self.get_trace_mode(),
            self.get_sample_rate(),
            inbound_sampled=inbound_sampled,
            malformed_inbound=malformed_inbound,
        )
