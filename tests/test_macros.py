import pytest

from oedoana.macros import (
    cumulative_table,
    extrapolate_positions,
    missing_ids,
    write_dq2dx,
)


def test_missing_ids():
    assert missing_ids([0, 2, 2, 5], 4) == [1, 3]


def test_missing_ids_all_present():
    assert missing_ids(range(8), 8) == []


def test_cumulative_table_invariants():
    rows = cumulative_table([1, 3, 0, 4], 4, 0.4)
    values = [v for _, v in rows]
    assert values == sorted(values)
    assert values[-1] == pytest.approx(1.0)
    assert rows[-1][0] == pytest.approx(0.4)
    assert len(rows) == 4


def test_cumulative_table_extends_past_counts():
    rows = cumulative_table([2, 2], 4, 0.4)
    assert rows[2][1] == pytest.approx(1.0)
    assert rows[3][1] == pytest.approx(1.0)


def test_cumulative_table_empty_raises():
    with pytest.raises(ValueError):
        cumulative_table([0, 0], 2, 0.3)


def test_write_dq2dx_round_trip(tmp_path):
    path = tmp_path / "prm" / "run" / "xc0.dat"
    write_dq2dx(path, [1, 1, 2], 3, 0.3)
    lines = path.read_text().splitlines()
    assert lines[0] == "3"
    parsed = [tuple(map(float, line.split())) for line in lines[1:]]
    expected = cumulative_table([1, 1, 2], 3, 0.3)
    assert len(parsed) == len(expected)
    for (x, v), (ex, ev) in zip(parsed, expected):
        assert x == pytest.approx(ex, rel=1e-5)
        assert v == pytest.approx(ev, rel=1e-5)


def test_extrapolate_parallel_beam():
    pos = extrapolate_positions(3.0, 3.0, -2.0, -2.0)
    assert pos.a_angle == 0
    assert pos.b_angle == 0
    assert pos.xtpc == pytest.approx(3.0)
    assert pos.ytpc == pytest.approx(-2.0)


def test_extrapolate_symmetric():
    pos = extrapolate_positions(-1.0, 1.0, 1.0, -1.0)
    assert pos.xmean == 0
    assert pos.ymean == 0
    assert pos.xtpc == pytest.approx(-pos.ytpc)
    assert pos.a_angle > 0 > pos.b_angle