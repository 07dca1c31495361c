import json

import pytest

from oedoana.analysis import (
    TimingChargeColumns,
    charges,
    convert_tot,
    ids,
    main,
    sort_by_charge,
    tot_to_charge,
)
from oedoana.data import TimingChargeData


def _hits():
    return [
        TimingChargeData(id=3, timing=10.0, charge=5.0),
        TimingChargeData(id=1, timing=20.0, charge=30.0),
        TimingChargeData(id=7, timing=30.0, charge=12.0),
    ]


def test_tot_to_charge_zero_is_offset():
    assert tot_to_charge(0) == pytest.approx(0.006667)


def test_tot_to_charge_linear_branch_slope():
    assert tot_to_charge(10) - tot_to_charge(0) == pytest.approx(0.004667 * 10)


def test_tot_to_charge_quadratic_branch_zero_matches_constant():
    # the quadratic branch evaluated at tot=20 and tot=40 differ by the polynomial terms
    diff = tot_to_charge(40) - tot_to_charge(20)
    assert diff == pytest.approx(0.000469 * (1600 - 400) - 0.01415 * 20)


def test_convert_tot_leaves_input_untouched():
    hits = _hits()
    out = convert_tot(hits)
    assert [h.charge for h in hits] == [5.0, 30.0, 12.0]
    assert [h.charge for h in out] == [tot_to_charge(5.0), tot_to_charge(30.0), tot_to_charge(12.0)]
    assert [h.id for h in out] == [3, 1, 7]


def test_sort_by_charge_descending_and_ascending():
    hits = _hits()
    assert charges(sort_by_charge(hits)) == [30.0, 12.0, 5.0]
    assert charges(sort_by_charge(hits, descending=False)) == [5.0, 12.0, 30.0]


def test_charges_and_ids_follow_order():
    hits = _hits()
    assert charges(hits) == [5.0, 30.0, 12.0]
    assert ids(hits) == [3.0, 1.0, 7.0]


def test_columns_names_and_rows():
    builder = TimingChargeColumns("sr91x")
    builder.fill(_hits())
    builder.fill([])
    assert len(builder) == 2
    table = builder.finalize()
    assert list(table) == ["sr91x_tot", "sr91x_timing", "sr91x_id"]
    assert table["sr91x_tot"] == [[5.0, 30.0, 12.0], []]
    assert table["sr91x_timing"] == [[10.0, 20.0, 30.0], []]
    assert table["sr91x_id"] == [[3, 1, 7], []]


def test_columns_store_single_precision():
    builder = TimingChargeColumns("d")
    builder.fill([TimingChargeData(id=0, timing=0.1, charge=1.5)])
    table = builder.finalize()
    assert table["d_tot"] == [[1.5]]
    assert table["d_timing"][0][0] == pytest.approx(0.1, rel=1e-6)
    assert table["d_timing"][0][0] != 0.1


def test_finalize_resets_builder():
    builder = TimingChargeColumns("x")
    builder.fill(_hits())
    builder.finalize()
    assert len(builder) == 0
    assert builder.finalize()["x_tot"] == []


def test_main_requires_input(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().out


def test_main_rejects_unknown_option(capsys):
    assert main(["-z", "foo"]) == 1


def test_main_round_trip(tmp_path):
    events = [
        {
            "sr91_x_cal": [{"id": 2, "timing": 1.0, "charge": 4.0}],
            "diapad": [{"id": 5, "timing": 2.0, "charge": 8.0}],
        },
        {"sr91_y_cal": [{"id": 9, "timing": 3.0, "charge": 0.5}]},
    ]
    src = tmp_path / "events.jsonl"
    src.write_text("\n".join(json.dumps(e) for e in events) + "\n")
    dst = tmp_path / "out.json"
    assert main(["-i", str(src), "-o", str(dst), "-n", "2"]) == 0
    table = json.loads(dst.read_text())
    assert list(table) == [
        "sr91x_tot", "sr91x_timing", "sr91x_id",
        "sr91y_tot", "sr91y_timing", "sr91y_id",
        "diapad_tot", "diapad_timing", "diapad_id",
    ]
    assert table["sr91x_tot"] == [[4.0], []]
    assert table["sr91y_id"] == [[], [9]]
    assert table["diapad_timing"] == [[2.0], []]