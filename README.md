# slamkit

Building blocks for 2-D grid-based SLAM with a laser range finder and
wheel odometry.

- **Pose geometry** (`slamkit.geometry`): immutable `Point` and
  `OrientedPoint` with `+`, `-`, scalar `*`, `Point.dot`,
  `OrientedPoint.normalized` and `OrientedPoint.rotate`; plus
  `absolute_difference` (a pose expressed in the frame of another),
  `absolute_sum` (apply a relative increment to a pose, or map a point into
  world coordinates), `interpolate`, `euclidian_dist`, `square_dist`,
  `point_max` and `point_min`.
- **Odometry motion model** (`slamkit.motion`): `MotionModel` (noise
  parameters `srr`, `srt`, `str_`, `stt` and a `random.Random` as `rng`)
  samples noisy poses with `draw_from_motion` and `draw_from_odometry`, and
  gives a Gaussian approximation of a motion as a `Covariance3`.
- **Particle filter helpers** (`slamkit.particlefilter`): `to_normal_form`
  and `to_log_form` for log/normal weights, low-variance resampling with
  `resample_indexes` and `resample_particles`, `repeat_indexes`, `neff`,
  `normalize` and run-length encoding with `rle`.
- **Trajectory trees** (`slamkit.tree`): `TrajectoryNode` chains whose
  ancestors are shared between particles; `TrajectoryNode.path` walks back
  to the root, `reset_tree` and `propagate_weights` accumulate leaf weights
  towards the roots (raising `ValueError` when they do not sum to one), and
  `copy_trajectories` deep-copies the whole tree keeping shared ancestors
  shared.
- **GFS log reading** (`slamkit.gfsreader`): `parse_record` and
  `RecordList.read` parse `LASER_READING`, `ODO_UPDATE`, `ODOM`,
  `SM_UPDATE`, `SIMULATOR_POS`, `RESAMPLE`, `NEFF`, `COMMENT`/`#COMMENT`
  and `ENTROPY` lines; other lines are skipped. A `RecordList` gives the
  accumulated log weight of a particle (`log_weight`), the best final
  particle (`best_index`), the laser records along one particle's ancestry
  (`compute_path`), and writes a particle's path with its error against
  ground-truth poses (`print_path`, which returns the average position
  error) or the last particle cloud (`print_last_particles`).
- **Odometry calibration** (`slamkit.calibration`, `slamkit.odometry`):
  `OdomCalibrator` keeps a ring buffer of odometry/scan increment pairs as
  an over-determined linear system and solves it by least squares for a
  3×3 correction matrix. `CalibrationSession` feeds it from odometry poses:
  `add_scan` computes the increment since the last accepted pose, ignores
  motions below 5 cm and 5°, and integrates odometry and scan paths;
  `calibrate` returns the correction matrix and the corrected path. Helpers
  `relative_pose`, `compose_increment`, `corrected_path`, `is_small_motion`
  and `scan_to_laser_data` (ranges outside 0.1–20 become invalid, `-1`) are
  available on their own; `IcpParams` holds scan-matcher settings.

## Installation

```
pip install .
```

The only runtime dependency is NumPy.

## Quick look

```python
from math import pi
from slamkit.geometry import OrientedPoint, absolute_difference, absolute_sum

start = OrientedPoint(1.0, 2.0, pi / 2)
end = OrientedPoint(1.0, 3.0, pi / 2)

delta = absolute_difference(end, start)   # end seen from start: about (1, 0, 0)
again = absolute_sum(start, delta)        # back to end
```

```python
from slamkit.particlefilter import neff, normalize

weights = normalize([1.0, 1.0, 2.0])
print(neff(weights))
```

```python
from slamkit.gfsreader import RecordList

records = RecordList()
with open("run.gfs") as stream:
    records.read(stream)
best = records.best_index()
```

```python
from slamkit.odometry import CalibrationSession

session = CalibrationSession(data_len=100)
session.add_scan([0.5, 0.0, 0.0], scan_delta=[0.55, 0.0, 0.0])
session.add_scan([1.0, 0.0, 0.0], scan_delta=[0.55, 0.0, 0.0])
correction, path = session.calibrate()
```

## Command-line tools

Three tools work on GFS log files. Each returns exit status 1 and prints a
usage line or a message when the arguments or files are wrong. Flags must
come before the file names, in the order shown.

Write the path of the best particle as a log with odometry, laser and
weight lines:

```
gfs2log [-err] [-neff] [-part] [-odom] <infilename> <outfilename>
```

- `-err` writes only the commented start poses and the error lines against
  the ground-truth poses, and prints the average error.
- `-neff` is accepted and has no effect.
- `-part` appends the final particle cloud as markers.
- `-odom` writes the raw odometry from `ODOM` records instead of the
  corrected poses.

Extract the effective sample size per processed frame, one
`<frame> <neff>` pair per line:

```
gfs2neff <infilename> <nefffilename>
```

Write the path of the best particle in the `POS` / `LASER-RANGE` record
format, with poses in centimetres and degrees and a `MARK-POS` line at each
resampling:

```
gfs2rec [-err] [-neff] <infilename> <outfilename>
```

With `-err` only the error lines and markers are written; `-neff` is
accepted and has no effect.

## What the package does not do

It does not run a SLAM filter: there are no occupancy grid maps, no scan
matcher and no processing of live sensor streams. Likewise
`CalibrationSession` does not match scans itself; the scan-matched
increment is given to `add_scan` by the caller (without one, the odometry
increment is used), and `IcpParams` only holds settings for an external
matcher.

## Running the tests

```
pip install .[test]
pytest
```