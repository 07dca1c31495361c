"""Decoders for A3100 and SIS3301 module data words."""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


def _words(buffer: bytes) -> Iterator[int]:
    """Yield the little-endian 32-bit words of a buffer, ignoring a partial tail."""
    usable = len(buffer) - len(buffer) % 4
    for (word,) in struct.iter_unpack("<I", memoryview(buffer)[:usable]):
        yield word


@dataclass
class RawDataSimple:
    """A single raw value read from one channel."""

    segment_id: int
    geo: int
    channel: int
    value: int = 0


@dataclass
class RawDataTriggeredList:
    """A triggered-list hit: ADC value, time stamp halves and event counter."""

    segment_id: int
    geo: int
    channel: int
    adc: int = 0
    tsi_hi: int = 0
    tsi_lo: int = 0
    event_count: int = 0


@dataclass
class RawDataFadc:
    """A sampled waveform from one flash-ADC channel."""

    segment_id: int
    geo: int
    channel: int
    timestamp: int = 0
    offset: int = 0
    pattern: int = 0
    samples: list[int] = field(default_factory=list)


class A3100Decoder:
    """Decoder for A3100 data in plain mode."""

    module_id = 31

    def decode(self, buffer: bytes, segment_id: int) -> list[RawDataSimple]:
        hits = []
        geo = 0
        for word in _words(buffer):
            if word & 0x60000000 == 0x60000000:
                geo = 1
                continue
            channel = (word & 0x0003C000) >> 14
            hits.append(RawDataSimple(segment_id, geo, channel, word & 0x1FFF))
        return hits


class A3100FreeRunTSIDecoder:
    """Decoder for A3100 data in triggered-list (free-run TSI) mode."""

    module_id = 31

    HEADER_MASK = 0xE0000000
    FIRST_WORD = 0xC0000000
    SECOND_WORD = 0xE0000000
    THIRD_WORD = 0x60000000
    ADC_MASK = 0x00001FFF
    CH_MASK = 0x0003C000
    CH_SHIFT = 14
    TSI_HI_MASK = 0x1FFC0000
    TSI_HI_SHIFT = 18
    TSI_LO_MASK = 0x1FFFFFFF
    EVENT_COUNT_MASK = 0x0FFFFFFF

    def decode(self, buffer: bytes, segment_id: int) -> list[RawDataTriggeredList]:
        hits = []
        geo = 1
        channel = adc = tsi_hi = tsi_lo = event_count = 0
        for word in _words(buffer):
            header = word & self.HEADER_MASK
            if header == self.FIRST_WORD:
                adc = word & self.ADC_MASK
                tsi_hi = (word & self.TSI_HI_MASK) >> self.TSI_HI_SHIFT
                channel = (word & self.CH_MASK) >> self.CH_SHIFT
                continue
            if header == self.SECOND_WORD:
                tsi_lo = word & self.TSI_LO_MASK
            elif header == self.THIRD_WORD:
                event_count = word & self.EVENT_COUNT_MASK
                geo = 1
            else:
                continue
            hits.append(
                RawDataTriggeredList(
                    segment_id, geo, channel, adc, tsi_hi, tsi_lo, event_count
                )
            )
        return hits


class SIS3301Decoder:
    """Decoder for SIS3301 flash-ADC waveforms."""

    module_id = 8

    MASK_GEOMETRY = 0x1FFF0000
    MASK_CHANNEL = 0x000000FF
    MASK_PAGESIZE = 0x3FFFFFFF
    MASK_DATA_1ST = 0x0000FFFF
    MASK_DATA_2ND = 0xFFFF0000
    SHIFT_GEOMETRY = 16
    SHIFT_DATA_2ND = 16

    def decode(self, buffer: bytes, segment_id: int) -> list[RawDataFadc]:
        words = list(_words(buffer))
        hits: list[RawDataFadc] = []
        have_header = have_trailer = False
        page_size = 0
        current: RawDataFadc | None = None
        i = 0
        while i < len(words):
            word = words[i]
            kind = (word & 0xC0000000) >> 30
            if not have_header and not have_trailer and kind == 0x3:
                have_header = True
                current = RawDataFadc(
                    segment_id,
                    (word & self.MASK_GEOMETRY) >> self.SHIFT_GEOMETRY,
                    word & self.MASK_CHANNEL,
                )
                i += 1
            elif have_header and not have_trailer and kind == 0x2:
                have_trailer = True
                page_size = word & self.MASK_PAGESIZE
                current.timestamp, current.offset, current.pattern = page_size, 0, 0
                i += 1
            elif have_header and have_trailer:
                count = page_size // 2
                block = words[i : i + count]
                if len(block) < count:
                    raise ValueError(
                        f"truncated SIS3301 data: expected {count} words, got {len(block)}"
                    )
                for sample in block:
                    current.samples.append(sample & self.MASK_DATA_1ST)
                    current.samples.append(
                        (sample & self.MASK_DATA_2ND) >> self.SHIFT_DATA_2ND
                    )
                hits.append(current)
                i += count
                have_header = have_trailer = False
            else:
                logger.warning("Decode: unknown header 0x%08x", word)
                break
        return hits