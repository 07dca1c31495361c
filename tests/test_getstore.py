from datetime import datetime

import pytest

from oedoana.getstore import (
    FPN_IDS,
    AsAdFrame,
    GetEventStore,
    RunInfo,
    fpn_group,
    parse_run_file_name,
)

FILE_NAME = "run_0012.dat.21-03-18_14h27m05s.graw"
ALL_HIT = (1 << 68) - 1


def _mask(*channels):
    value = 0
    for ch in channels:
        value |= 1 << (67 - ch)
    return value


def _frame(samples, patterns=None, cobo=1, asad=2, event_time=77, offset=3):
    if patterns is None:
        patterns = (ALL_HIT, ALL_HIT, ALL_HIT, ALL_HIT)
    return AsAdFrame(
        cobo_id=cobo,
        asad_id=asad,
        event_time=event_time,
        read_offset=offset,
        hit_patterns=patterns,
        samples=samples,
    )


@pytest.mark.parametrize(
    "channel, group",
    [(0, 0), (16, 0), (17, 1), (33, 1), (34, 2), (50, 2), (51, 3), (67, 3)],
)
def test_fpn_group_boundaries(channel, group):
    assert fpn_group(channel) == group


def test_fpn_ids_lie_in_their_own_group():
    assert [fpn_group(ch) for ch in FPN_IDS] == [0, 1, 2, 3]


@pytest.mark.parametrize("channel", [-1, 68])
def test_fpn_group_out_of_range(channel):
    with pytest.raises(ValueError):
        fpn_group(channel)


def test_parse_run_file_name():
    info = parse_run_file_name("/data/get/" + FILE_NAME)
    assert info.run_name == "run"
    assert info.run_number == 12
    assert datetime.fromtimestamp(info.start_time) == datetime(2018, 3, 21, 14, 27, 5)


def test_parse_run_file_name_rejects_short_name():
    with pytest.raises(ValueError):
        parse_run_file_name("run_0012.graw")


def test_run_info_from_file(tmp_path):
    path = tmp_path / FILE_NAME
    path.write_bytes(b"\0" * (1024 * 1024))
    info = RunInfo.from_file(path)
    assert info.total_size == 1.0
    assert info.run_number == 12


@pytest.mark.parametrize("bucket", [(1,), (5, 2), (-1, 3), (0, 512)])
def test_invalid_bucket(bucket):
    with pytest.raises(ValueError):
        GetEventStore(valid_bucket=bucket)


def test_equal_bucket_means_full_range():
    assert GetEventStore(valid_bucket=(7, 7)).valid_bucket == (0, 512)


def test_require_hit_bit_filters_channels():
    samples = {(0, 3): [5] * 512, (0, 4): [6] * 512}
    frame = _frame(samples, patterns=(_mask(3), 0, 0, 0))
    store = GetEventStore()
    hits = store.process_asad(frame)
    assert [(h.aget, h.channel) for h in hits] == [(0, 3)]

    all_hits = GetEventStore(require_hit_bit=False).process_asad(frame)
    assert sorted(h.channel for h in all_hits) == [3, 4]


def test_hit_fields_and_window():
    wave = list(range(1, 513))
    frame = _frame({(2, 10): wave})
    store = GetEventStore(valid_bucket=(4, 9))
    hits = store.process_asad(frame)
    assert len(hits) == 1
    hit = hits[0]
    assert hit.samples == wave[4:10]
    assert hit.offset == frame.read_offset + 4
    assert hit.unique_id == 2 + 4 * (frame.asad_id + 4 * frame.cobo_id)
    assert hit.segment.cobo == frame.cobo_id
    assert hit.segment.asad == frame.asad_id
    assert hit.timestamp == frame.event_time


def test_zero_first_sample_skipped():
    frame = _frame({(0, 1): [0] + [9] * 511, (0, 2): [9] * 512})
    hits = GetEventStore().process_asad(frame)
    assert [h.channel for h in hits] == [2]


def test_fpn_subtraction():
    fpn = [10 + i for i in range(512)]
    adc = [100 + 2 * i for i in range(512)]
    frame = _frame({(0, 11): fpn, (0, 5): adc})
    hits = GetEventStore(subtract_fpn=True).process_asad(frame)
    # the FPN channel itself starts at zero after reference subtraction and is dropped
    assert [h.channel for h in hits] == [5]
    expected = [a - (f - fpn[0]) for a, f in zip(adc, fpn)]
    assert hits[0].samples == expected


def test_fpn_subtraction_only_in_same_group():
    fpn = [10 + i for i in range(512)]
    adc = [100 + 2 * i for i in range(512)]
    frame = _frame({(0, 11): fpn, (0, 40): adc})
    hits = GetEventStore(subtract_fpn=True).process_asad(frame)
    assert hits[0].channel == 40
    assert hits[0].samples == adc


def test_next_event_counts_and_stops_on_end_of_data():
    store = GetEventStore(start_event_num=5)
    info = parse_run_file_name(FILE_NAME)
    store.open_run(info)
    frame = _frame({(0, 1): [3] * 512}, event_time=1234)
    event = store.next_event([frame])
    assert event.event_number == 5
    assert event.timestamp == 1234
    assert len(event.hits) == 1
    assert store.event_number == 6
    assert info.event_number == 1
    assert store.run_number == 12
    assert store.next_event(None) is None
    assert store.finished
    assert store.next_event([frame]) is None


def test_next_event_respects_max_event_num():
    store = GetEventStore(max_event_num=2)
    frame = _frame({(0, 1): [3] * 512})
    produced = 0
    for _ in range(10):
        if store.next_event([frame]) is None:
            break
        produced += 1
    assert produced == store.max_event_num + 1
    assert store.finished