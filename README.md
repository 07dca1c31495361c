# oedoana

Tools for working with data from OEDO beam-line experiments: raw module
decoders, magnetic-rigidity (Bρ) reconstruction, hit validation and
summaries, GET electronics event assembly, and small analysis helpers.

The package is pure Python and has no runtime dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

| Module | Contents |
| --- | --- |
| `oedoana.data` | `TimingChargeData` (id, timing, charge, valid) and `DaliData` with `clear()` and `copy()` |
| `oedoana.decoders` | `A3100Decoder`, `A3100FreeRunTSIDecoder`, `SIS3301Decoder`; each `decode(buffer, segment_id)` reads little-endian 32-bit words and returns a list of `RawDataSimple`, `RawDataTriggeredList` or `RawDataFadc` records |
| `oedoana.brho` | `BrhoReconstructor` (first order, sections 35 and 57, modes 0–2), `S1BrhoReconstructor` (iterative higher order), `Track`, and `roots_cubic`, which returns a `CubicRoots` tuple |
| `oedoana.processors` | `validate_get_charge`, `ChargeRangeValidator`, `dali_summary`, `ion_chamber_average` |
| `oedoana.analysis` | `tot_to_charge`, `convert_tot`, `sort_by_charge`, `charges`, `ids`, `TimingChargeColumns`, `dump_columns` and the command entry point `main` |
| `oedoana.getstore` | `GetEventStore` (`process_asad`, `next_event`), `AsAdFrame`, `GetEvent`, `GetHit`, `SegmentKey`, `RunInfo` (with `RunInfo.from_file`), `parse_run_file_name`, `fpn_group` |
| `oedoana.savecmd` | `SaveCommand`, which works out the directory and file names a figure is saved under and calls a save function you supply |
| `oedoana.macros` | `missing_ids`, `cumulative_table`, `write_dq2dx`, `extrapolate_positions` (returns `BeamPositions`) |

Invalid settings raise `ValueError`: an unknown section or mode in
`BrhoReconstructor`, a reversed range in `ChargeRangeValidator`, a bad
valid-bucket range in `GetEventStore`, an unparsable run file name, an empty
histogram in `cumulative_table`, or a missing file name or save function in
`SaveCommand`.

## Examples

Decoding a raw A3100 buffer belonging to segment 7:

```python
from oedoana.decoders import A3100Decoder

records = A3100Decoder().decode(buffer, 7)
```

Reconstructing Bρ between two foci:

```python
from oedoana.brho import BrhoReconstructor, Track

reco = BrhoReconstructor(brho0=7.0, z=0.0, mode=0, section=35)
value = reco.reconstruct(Track(x=1.0, a=0.002), Track(x=3.0, a=0.001))
```

`reconstruct` returns `None` when either track is `None`.

Averaging ion-chamber channels, stopping at the first channel that falls
below a fraction of channel 0:

```python
from oedoana.processors import ion_chamber_average

average = ion_chamber_average(hits, num_channels=6, drop_ratio=0.5)
```

Assembling a GET event from AsAd frames:

```python
from oedoana.getstore import AsAdFrame, GetEventStore

store = GetEventStore(valid_bucket=(0, 0), subtract_fpn=True)
event = store.next_event([frame])   # None once frames is None or the limit is passed
```

Finding detector channels that never fired:

```python
from oedoana.macros import missing_ids

silent = missing_ids(observed_ids, 96)
```

## Command line

```
oedoana-analysis -i events.jsonl -o table.json
```

The input is a JSON-lines file, one event per line. Each event may hold the
lists `sr91_x_cal`, `sr91_y_cal` and `diapad`, whose items are objects with
`id`, `timing` and `charge`. The output (default `output.json`) is a JSON
object of list-valued columns `<name>_tot`, `<name>_timing` and `<name>_id`
for the names `sr91x`, `sr91y` and `diapad`, one row per event, with charges
and timings rounded to 32-bit floats and ids to 32-bit integers. The `-n`
option is accepted but does not change anything. Without `-i`, or with an
unrecognised option, the command prints a usage line and exits with status 1.

## What the package does not do

- It does not read ROOT trees or write Parquet files; the command works on
  JSON-lines input and writes JSON.
- It does not read GET data files; `GetEventStore` works on `AsAdFrame`
  objects that you build yourself.
- It does not draw or print figures; `SaveCommand` only decides paths and
  hands them to the save function you pass in.
- There is no interactive command shell or processing-loop framework; the
  decoders and processors are plain functions and classes to call from your
  own code.