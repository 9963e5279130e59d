"""Benchmark result data structures and their binary encodings.

Two records are persisted between runs::

    SamplingData (one benchmark run)
      → samples: iteration count per sample   (u64 each)
      → times:   elapsed nanoseconds per sample (u128 each)

    TimingData (one timed loop or iterator)
      → min_nanos, max_nanos, elapsed, iterations (u128 each)

Byte layouts, all little-endian, no version field::

    SamplingData:  N (u64) | N × sample (u64) | N × time (u128)
                   total length is exactly 8 + 8N + 16N bytes
    TimingData:    min | max | elapsed | iterations, 64 bytes

A change to either layout is only detectable through the length check,
so decoders validate the exact length before touching any field.
"""

from __future__ import annotations

from dataclasses import dataclass, field

_U64_BYTES = 8
_U128_BYTES = 16
_U64_MAX = (1 << 64) - 1
_U128_MAX = (1 << 128) - 1
_TIMING_DATA_LEN = 4 * _U128_BYTES


class SamplingDataError(ValueError):
    """Raised when serialized benchmark data cannot be decoded or encoded."""


# ---------------------------------------------------------------------------
# SamplingData
# ---------------------------------------------------------------------------


@dataclass
class SamplingData:
    """Raw samples of one benchmark run.

    ``samples[i]`` iterations of the work took ``times[i]`` nanoseconds.
    """

    samples: list[int] = field(default_factory=list)
    times: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def total_iterations(self) -> int:
        return sum(self.samples)

    @property
    def total_elapsed(self) -> int:
        return sum(self.times)


def serialize_sampling_data(data: SamplingData) -> bytes:
    """Encode *data* into the fixed-width sampling layout.

    Raises:
        SamplingDataError: If ``samples`` and ``times`` differ in length
            or a value does not fit its unsigned field.
    """
    n = len(data.samples)
    if len(data.times) != n:
        raise SamplingDataError(
            f"Cannot serialize sampling data with {n} samples but {len(data.times)} times"
        )
    buf = bytearray(n.to_bytes(_U64_BYTES, "little"))
    for sample in data.samples:
        buf += _encode_unsigned(sample, _U64_BYTES, _U64_MAX, "sample")
    for elapsed in data.times:
        buf += _encode_unsigned(elapsed, _U128_BYTES, _U128_MAX, "time")
    return bytes(buf)


def deserialize_sampling_data(buf: bytes) -> SamplingData:
    """Decode a buffer produced by :func:`serialize_sampling_data`.

    Raises:
        SamplingDataError: If the buffer is shorter than the count prefix
            or its length is not exactly ``8 + 8N + 16N``.
    """
    buf_len = len(buf)
    if buf_len < _U64_BYTES:
        raise SamplingDataError(
            f"Found malformed serialized data, length too short {buf_len}"
        )
    n = int.from_bytes(buf[:_U64_BYTES], "little")
    expected = _U64_BYTES + n * _U64_BYTES + n * _U128_BYTES
    if buf_len != expected:
        raise SamplingDataError(
            "Found malformed serialized data, unexpected length. "
            f"Expected {expected} found {buf_len}"
        )

    times_offset = _U64_BYTES + n * _U64_BYTES
    samples = [
        int.from_bytes(buf[off : off + _U64_BYTES], "little")
        for off in range(_U64_BYTES, times_offset, _U64_BYTES)
    ]
    times = [
        int.from_bytes(buf[off : off + _U128_BYTES], "little")
        for off in range(times_offset, buf_len, _U128_BYTES)
    ]
    return SamplingData(samples=samples, times=times)


# ---------------------------------------------------------------------------
# TimingData
# ---------------------------------------------------------------------------


@dataclass
class TimingData:
    """Aggregate timing of a plain timed loop or iterator."""

    min_nanos: int
    max_nanos: int
    elapsed: int
    iterations: int

    @property
    def mean(self) -> float:
        """Mean nanoseconds per iteration (NaN when nothing ran)."""
        if self.iterations == 0:
            return float("nan")
        return self.elapsed / self.iterations

    def pretty_print(self) -> None:
        """Print the data to stdout under the anonymous label."""
        from calibench.bench.display import SimplePrinter

        SimplePrinter().report_timing("anonymous", self)


def serialize_timing_data(data: TimingData) -> bytes:
    """Encode *data* as four little-endian u128 fields (64 bytes)."""
    return b"".join(
        _encode_unsigned(value, _U128_BYTES, _U128_MAX, name)
        for name, value in (
            ("min_nanos", data.min_nanos),
            ("max_nanos", data.max_nanos),
            ("elapsed", data.elapsed),
            ("iterations", data.iterations),
        )
    )


def deserialize_timing_data(buf: bytes) -> TimingData:
    """Decode a buffer produced by :func:`serialize_timing_data`."""
    if len(buf) != _TIMING_DATA_LEN:
        raise SamplingDataError(
            "Unexpected buffer len for serialized timing data, "
            f"expected {_TIMING_DATA_LEN} but got {len(buf)}"
        )
    fields = [
        int.from_bytes(buf[off : off + _U128_BYTES], "little")
        for off in range(0, _TIMING_DATA_LEN, _U128_BYTES)
    ]
    return TimingData(
        min_nanos=fields[0],
        max_nanos=fields[1],
        elapsed=fields[2],
        iterations=fields[3],
    )


def _encode_unsigned(value: int, width: int, max_value: int, name: str) -> bytes:
    if value < 0 or value > max_value:
        raise SamplingDataError(
            f"Value {value} for {name} does not fit in an unsigned {width * 8}-bit field"
        )
    return int(value).to_bytes(width, "little")
