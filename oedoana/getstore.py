"""Event store for GET electronics data: AsAd frames into per-channel waveforms."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

NUM_AGETS = 4
NUM_CHANNELS = 68
NUM_BUCKETS = 512
FPN_IDS = (11, 22, 45, 56)
SEGMENT_DEVICE = 63


def _int32(value: int) -> int:
    return (value + 2**31) % 2**32 - 2**31


def fpn_group(channel: int) -> int:
    """Return the index (0-3) of the FPN channel serving the given AGET channel."""
    if not 0 <= channel < NUM_CHANNELS:
        raise ValueError(f"channel {channel} out of range [0, {NUM_CHANNELS})")
    if channel < 17:
        return 0
    if channel < 34:
        return 1
    if channel < 51:
        return 2
    return 3


@dataclass
class RunInfo:
    """Run-level information derived from a GET data file."""

    run_name: str
    run_number: int
    start_time: int
    total_size: float = 0.0
    event_number: int = 0

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> RunInfo:
        """Build the run information of an existing data file, including its size in MB."""
        size = os.stat(path).st_size / 1024.0 / 1024.0
        info = parse_run_file_name(path)
        info.total_size = size
        return info


def _field(name: str, start: int, length: int, label: str) -> int:
    text = name[start : start + length]
    if len(text) != length or not text.isdigit():
        raise ValueError(f"cannot read {label} from file name {name!r}")
    return int(text)


def parse_run_file_name(path: str | os.PathLike[str]) -> RunInfo:
    """Parse run name, run number and start time (local time) from a file name.

    The base name carries the run name in characters 0-2, the run number in
    4-7, then day, month, two-digit year, hour, minute and second at fixed
    positions 13, 16, 19, 22, 25 and 28.
    """
    name = os.path.basename(os.fspath(path))
    run_name = name[0:3]
    if len(run_name) != 3:
        raise ValueError(f"cannot read run name from file name {name!r}")
    run_number = _field(name, 4, 4, "run number")
    day = _field(name, 13, 2, "day")
    month = _field(name, 16, 2, "month")
    year = _field(name, 19, 2, "year")
    hour = _field(name, 22, 2, "hour")
    minute = _field(name, 25, 2, "minute")
    second = _field(name, 28, 2, "second")
    start = datetime(2000 + year, month, day, hour, minute, second)
    return RunInfo(run_name, run_number, int(start.timestamp()))


@dataclass
class AsAdFrame:
    """One AsAd board frame: four AGETs of 68 channels of sampled waveforms.

    ``hit_patterns`` holds one bit mask per AGET, channel ``c`` being hit when
    bit ``67 - c`` is set. ``samples`` maps ``(aget, channel)`` to the list of
    time-bucket values; a missing key means the channel was not read out.
    """

    cobo_id: int
    asad_id: int
    event_time: int = 0
    read_offset: int = 0
    hit_patterns: Sequence[int] = ()
    samples: dict[tuple[int, int], list[int]] = field(default_factory=dict)

    def is_hit(self, aget: int, channel: int) -> bool:
        if aget >= len(self.hit_patterns):
            return False
        return bool((self.hit_patterns[aget] >> (NUM_CHANNELS - 1 - channel)) & 1)

    def sample(self, aget: int, channel: int) -> list[int] | None:
        return self.samples.get((aget, channel))


@dataclass(frozen=True)
class SegmentKey:
    """Identifies the segment a GET hit belongs to."""

    device: int
    cobo: int
    asad: int
    module: int = 0


@dataclass
class GetHit:
    """A waveform read from one AGET channel."""

    segment: SegmentKey
    aget: int
    channel: int
    unique_id: int
    timestamp: int
    offset: int
    pattern: int = 0
    samples: list[int] = field(default_factory=list)


@dataclass
class GetEvent:
    """One event: its number, time stamp and all channel waveforms."""

    event_number: int
    timestamp: int
    hits: list[GetHit] = field(default_factory=list)


class GetEventStore:
    """Turn AsAd frames into channel waveforms, with optional FPN subtraction."""

    def __init__(
        self,
        valid_bucket: Sequence[int] = (0, 0),
        subtract_fpn: bool = False,
        require_hit_bit: bool = True,
        max_event_num: int = 0,
        start_event_num: int = 0,
    ) -> None:
        if len(valid_bucket) < 2:
            raise ValueError(f"ValidBucket has {len(valid_bucket)} size instead of 2")
        start, end = valid_bucket[0], valid_bucket[1]
        if start > end:
            raise ValueError("ValidBucket start is larger than end")
        if start < 0 or end >= NUM_BUCKETS:
            raise ValueError(
                f"ValidBucket [{start},{end}] out of range [0, {NUM_BUCKETS}]"
            )
        if start == end:
            start, end = 0, NUM_BUCKETS
        self.valid_bucket = (start, end)
        self.subtract_fpn = subtract_fpn
        self.require_hit_bit = require_hit_bit
        self.max_event_num = max_event_num
        self.event_number = start_event_num
        self.event_number_total = start_event_num
        self.timestamp = 0
        self.run_info: RunInfo | None = None
        self.finished = False

    def open_run(self, info: RunInfo) -> None:
        """Attach the run information whose event counter follows this store."""
        self.run_info = info

    @property
    def run_number(self) -> int | None:
        return None if self.run_info is None else self.run_info.run_number

    @property
    def run_name(self) -> str | None:
        return None if self.run_info is None else self.run_info.run_name[:4]

    def _fpn_buffers(self, frame: AsAdFrame, aget: int) -> list[list[int] | None]:
        start = self.valid_bucket[0]
        buffers: list[list[int] | None] = []
        for fpn_id in FPN_IDS:
            raw = frame.sample(aget, fpn_id)
            if raw is None:
                buffers.append(None)
                continue
            ref = raw[start]
            buffers.append([value - ref for value in raw])
        return buffers

    def process_asad(self, frame: AsAdFrame) -> list[GetHit]:
        """Return the waveforms of the channels read out in one AsAd frame."""
        start, end = self.valid_bucket
        segment = SegmentKey(SEGMENT_DEVICE, frame.cobo_id, frame.asad_id, 0)
        hits = []
        for aget in range(NUM_AGETS):
            fpn = self._fpn_buffers(frame, aget) if self.subtract_fpn else None
            for channel in range(NUM_CHANNELS):
                if self.require_hit_bit and not frame.is_hit(aget, channel):
                    continue
                group = fpn_group(channel)
                ref_buffer = fpn[group] if fpn is not None else None
                adc = frame.sample(aget, channel)
                if adc is not None and ref_buffer is not None and FPN_IDS[group] == channel:
                    adc = ref_buffer
                if not adc or adc[0] == 0:
                    continue
                window = adc[start : end + 1]
                if ref_buffer is not None and FPN_IDS[group] != channel:
                    samples = [
                        value - ref
                        for value, ref in zip(window, ref_buffer[start : end + 1])
                    ]
                else:
                    samples = list(window)
                hits.append(
                    GetHit(
                        segment=segment,
                        aget=aget,
                        channel=channel,
                        unique_id=aget + NUM_AGETS * (frame.asad_id + 4 * frame.cobo_id),
                        timestamp=_int32(frame.event_time),
                        offset=frame.read_offset + start,
                        samples=samples,
                    )
                )
        return hits

    def _stop(self) -> None:
        self.finished = True

    def next_event(self, frames: Iterable[AsAdFrame] | None) -> GetEvent | None:
        """Build the next event from its AsAd frames.

        Returns None, and marks the store finished, when ``frames`` is None
        (no more data) or the maximum number of events has been passed.
        """
        if self.finished:
            return None
        if self.max_event_num > 0 and self.event_number_total > self.max_event_num:
            self._stop()
            return None
        if frames is None:
            self._stop()
            return None
        frames = list(frames)
        number = self.event_number
        self.event_number += 1
        self.event_number_total += 1
        if self.run_info is not None:
            self.run_info.event_number += 1
        hits: list[GetHit] = []
        for frame in frames:
            self.timestamp = frame.event_time
            hits.extend(self.process_asad(frame))
        return GetEvent(number, self.timestamp, hits)