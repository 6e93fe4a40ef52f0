"""Reader for grid-FastSLAM trace logs and reconstruction of particle paths."""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, TextIO, Type, TypeVar

from .geometry import OrientedPoint, absolute_difference

_RECORD_LINE = re.compile(r"\s*(\S+)(.*)", re.DOTALL)

_N = TypeVar("_N", int, float)


def _fixed(value: float) -> str:
    return f"{value:.6f}"


class _Tokens:
    """Whitespace-separated numbers read the way a formatted input stream reads them.

    Once a value is missing or malformed every later value reads as zero.
    """

    def __init__(self, text: str) -> None:
        self._tokens = iter(text.split())
        self.ok = True

    def number(self, kind: Type[_N] = float) -> _N:  # type: ignore[assignment]
        if self.ok:
            token = next(self._tokens, None)
            if token is not None:
                try:
                    return kind(token)
                except ValueError:
                    pass
            self.ok = False
        return kind(0)

    def pose(self) -> OrientedPoint:
        x = self.number()
        y = self.number()
        theta = self.number()
        return OrientedPoint(x, y, theta)


@dataclass
class Record:
    """A single line of a trace log."""

    dim: int = 0
    time: float = 0.0

    def write(self, out: TextIO) -> None:
        """Write the record in log form; records without a log form write nothing."""


@dataclass
class CommentRecord(Record):
    """Free text; ``text`` keeps everything after the keyword."""

    text: str = ""

    @classmethod
    def parse(cls, rest: str) -> "CommentRecord":
        return cls(text=rest)

    def write(self, out: TextIO) -> None:
        out.write(f"#GFS_COMMENT: {self.text}\n")


@dataclass
class PoseRecord(Record):
    """A single pose; ``true_pos`` marks a ground-truth (simulator) pose."""

    true_pos: bool = False
    pose: OrientedPoint = field(default_factory=OrientedPoint)

    @classmethod
    def parse(cls, rest: str) -> "PoseRecord":
        """Parse a simulator pose line, which always carries a true pose."""
        tokens = _Tokens(rest)
        pose = tokens.pose()
        return cls(true_pos=True, pose=pose, time=tokens.number())

    def write(self, out: TextIO) -> None:
        label = "TRUEPOS " if self.true_pos else "ODOM "
        p = self.pose
        t = _fixed(self.time)
        out.write(
            f"{label}{_fixed(p.x)} {_fixed(p.y)} {_fixed(p.theta)} 0 0 0 {t} pippo {t}\n"
        )


@dataclass
class NeffRecord(Record):
    """Effective sample size of the filter at one step."""

    neff: float = 0.0

    @classmethod
    def parse(cls, rest: str) -> "NeffRecord":
        tokens = _Tokens(rest)
        neff = tokens.number()
        return cls(neff=neff, time=tokens.number())

    def write(self, out: TextIO) -> None:
        t = _fixed(self.time)
        out.write(f"NEFF {_fixed(self.neff)} {t} pippo {t}\n")


@dataclass
class EntropyRecord(Record):
    """Pose, trajectory and map entropies at one step."""

    pose_entropy: float = 0.0
    trajectory_entropy: float = 0.0
    map_entropy: float = 0.0

    @classmethod
    def parse(cls, rest: str) -> "EntropyRecord":
        tokens = _Tokens(rest)
        pose = tokens.number()
        trajectory = tokens.number()
        grid = tokens.number()
        return cls(
            pose_entropy=pose,
            trajectory_entropy=trajectory,
            map_entropy=grid,
            time=tokens.number(),
        )

    def write(self, out: TextIO) -> None:
        t = _fixed(self.time)
        out.write(
            f"ENTROPY {_fixed(self.pose_entropy)} {_fixed(self.trajectory_entropy)} "
            f"{_fixed(self.map_entropy)} {t} pippo {t}\n"
        )


def _read_weighted_poses(tokens: _Tokens, dim: int):
    for _ in range(dim):
        pose = tokens.pose()
        weight = tokens.number()
        yield pose, weight


@dataclass
class OdometryRecord(Record):
    """Poses of all particles after the odometry update."""

    poses: List[OrientedPoint] = field(default_factory=list)

    @classmethod
    def parse(cls, rest: str) -> "OdometryRecord":
        tokens = _Tokens(rest)
        dim = tokens.number(int)
        poses = [pose for pose, _ in _read_weighted_poses(tokens, dim)]
        return cls(dim=dim, poses=poses, time=tokens.number())


@dataclass
class RawOdometryRecord(Record):
    """Raw odometry pose as reported by the robot."""

    pose: OrientedPoint = field(default_factory=OrientedPoint)

    @classmethod
    def parse(cls, rest: str) -> "RawOdometryRecord":
        tokens = _Tokens(rest)
        pose = tokens.pose()
        if not tokens.ok:
            raise ValueError(f"malformed ODOM record: {rest.strip()!r}")
        return cls(pose=pose, time=tokens.number())


@dataclass
class ScanMatchRecord(Record):
    """Poses and log weights of all particles after scan matching."""

    poses: List[OrientedPoint] = field(default_factory=list)
    weights: List[float] = field(default_factory=list)

    @classmethod
    def parse(cls, rest: str) -> "ScanMatchRecord":
        tokens = _Tokens(rest)
        dim = tokens.number(int)
        pairs = list(_read_weighted_poses(tokens, dim))
        return cls(
            dim=dim,
            poses=[pose for pose, _ in pairs],
            weights=[weight for _, weight in pairs],
        )


_LASER_HEADERS: Dict[int, str] = {}
for _dims, _header in (
    ((541, 540), " 4 -2.351831 4.712389 0.008727 30.0"),
    ((180, 181), " 0 -1.570796 3.141593 0.017453 81.9"),
    ((360, 361), " 0 -1.570796 3.141593 0.008726 81.9"),
    ((682, 683), f" 0 -2.094395 4.1887902 {_fixed(360.0 / 1024.0 / 180.0 * math.pi)} 5.5"),
):
    for _dim in _dims:
        _LASER_HEADERS[_dim] = _header
_DEFAULT_LASER_HEADER = " 0 -1.570796 3.141593 0.017453 81.9"


@dataclass
class LaserRecord(Record):
    """A laser scan with the pose it was taken from."""

    readings: List[float] = field(default_factory=list)
    pose: OrientedPoint = field(default_factory=OrientedPoint)
    weight: float = 0.0

    @classmethod
    def parse(cls, rest: str) -> "LaserRecord":
        tokens = _Tokens(rest)
        dim = tokens.number(int)
        readings = [tokens.number() for _ in range(dim)]
        pose = tokens.pose()
        return cls(dim=dim, readings=readings, pose=pose, time=tokens.number())

    def write(self, out: TextIO) -> None:
        dim = len(self.readings)
        header = _LASER_HEADERS.get(dim, _DEFAULT_LASER_HEADER)
        ranges = "".join(f" {r:.2f}" for r in self.readings)
        p = self.pose
        pose = f" {_fixed(p.x)} {_fixed(p.y)} {_fixed(p.theta)}"
        t = _fixed(self.time)
        out.write(f"WEIGHT {_fixed(self.weight)}\n")
        out.write(
            f"ROBOTLASER1 {header} 0.01 0 {dim}{ranges} 0{pose}{pose}"
            f" 0 0 0.55 0.375 1000000.0 {t} localhost {t}\n"
        )


@dataclass
class ResampleRecord(Record):
    """For each new particle, the index of the particle it was drawn from."""

    indexes: List[int] = field(default_factory=list)

    @classmethod
    def parse(cls, rest: str) -> "ResampleRecord":
        tokens = _Tokens(rest)
        dim = tokens.number(int)
        return cls(dim=dim, indexes=[tokens.number(int) for _ in range(dim)])


_PARSERS: Dict[str, Callable[[str], Record]] = {
    "LASER_READING": LaserRecord.parse,
    "ODO_UPDATE": OdometryRecord.parse,
    "ODOM": RawOdometryRecord.parse,
    "SM_UPDATE": ScanMatchRecord.parse,
    "SIMULATOR_POS": PoseRecord.parse,
    "RESAMPLE": ResampleRecord.parse,
    "NEFF": NeffRecord.parse,
    "COMMENT": CommentRecord.parse,
    "#COMMENT": CommentRecord.parse,
    "ENTROPY": EntropyRecord.parse,
}


def parse_record(line: str) -> Optional[Record]:
    """Parse one log line; lines of unknown type give ``None``."""
    match = _RECORD_LINE.match(line.rstrip("\r\n"))
    if match is None:
        return None
    parser = _PARSERS.get(match.group(1))
    if parser is None:
        return None
    return parser(match.group(2))


class RecordList(list):
    """An ordered trace log."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        super().__init__(records)
        self.sample_size: Optional[int] = None

    def read(self, stream: Iterable[str]) -> "RecordList":
        """Append every recognised record read from ``stream``."""
        for line in stream:
            record = parse_record(line)
            if record is not None:
                self.append(record)
        return self

    def _last_scan_match(self) -> Optional[ScanMatchRecord]:
        return next(
            (r for r in reversed(self) if isinstance(r, ScanMatchRecord)), None
        )

    def log_weight(self, index: int, frame: Optional[int] = None) -> float:
        """Accumulated log weight of particle ``index`` along its ancestry.

        Only records before position ``frame`` are considered; ``None`` means all.
        """
        weight = 0.0
        current = index
        for record in reversed(self[:frame]):
            if isinstance(record, ScanMatchRecord):
                weight += record.weights[current]
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        return weight

    def best_index(self) -> int:
        """Index of the final particle with the highest accumulated log weight."""
        if not self:
            return 0
        scan = self._last_scan_match()
        if scan is None:
            raise ValueError("log holds no scan-match records")
        size = len(scan.poses)
        self.sample_size = size
        best, best_weight = size + 1, -sys.float_info.max
        for i in range(size):
            w = self.log_weight(i)
            if w > best_weight:
                best, best_weight = i, w
        return best

    def print_last_particles(self, out: TextIO) -> None:
        """Write a marker for every particle of the last scan-match step."""
        scan = self._last_scan_match()
        if scan is None:
            return
        for pose in scan.poses:
            out.write(
                f"MARKER [color=black; circle={pose.x * 100:g},{pose.y * 100:g},10]"
                " 0 pippo 0\n"
            )

    def compute_path(self, index: int, frame: Optional[int] = None) -> "RecordList":
        """Laser records along the ancestry of particle ``index``, posed by that particle."""
        current = index
        pose = OrientedPoint()
        seen_match = False
        path: List[Record] = []
        for record in reversed(self[:frame]):
            if isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                seen_match = True
            elif isinstance(record, LaserRecord) and seen_match:
                path.append(replace(record, pose=pose))
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        path.reverse()
        return RecordList(path)

    def _reconstruct(self, index: int, raw_odom: bool) -> List[Record]:
        current = index
        pose = OrientedPoint()
        old_weight = 0.0
        weight = 0.0
        path: List[Record] = []
        for record in reversed(self):
            if isinstance(record, (NeffRecord, EntropyRecord, CommentRecord)):
                path.append(replace(record))
            elif isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                weight = record.weights[current] - old_weight
                old_weight = record.weights[current]
                if not raw_odom:
                    path.append(PoseRecord(pose=pose))
            elif isinstance(record, OdometryRecord):
                pose = record.poses[current]
                if not raw_odom:
                    path.append(PoseRecord(pose=pose, time=record.time))
            elif isinstance(record, RawOdometryRecord):
                if raw_odom:
                    path.append(PoseRecord(pose=record.pose, time=record.time))
            elif isinstance(record, PoseRecord):
                path.append(replace(record))
            elif isinstance(record, LaserRecord):
                path.append(replace(record, pose=pose, weight=weight))
            elif isinstance(record, ResampleRecord):
                path.append(replace(record))
                current = record.indexes[current]
        path.reverse()
        return path

    def print_path(
        self,
        out: TextIO,
        index: int,
        err: bool = False,
        raw_odom: bool = False,
    ) -> float:
        """Write the trajectory of particle ``index`` and its error against true poses.

        With ``err`` only the error lines are written. Returns the average
        position error (NaN when no error could be computed).
        """
        started = False
        transformation = False
        true_found = False
        true_pending = False
        true_pose = true_start = real_start = OrientedPoint()
        neff = 0.0
        total_error = 0.0
        count = 0
        for record in self._reconstruct(index, raw_odom):
            if isinstance(record, NeffRecord):
                if self.sample_size is None:
                    self.best_index()
                size = self.sample_size
                neff = record.neff / size if size else math.inf
            started = started or isinstance(record, LaserRecord)
            is_pose = isinstance(record, PoseRecord)
            if started and not true_found and is_pose and record.true_pos:
                true_found = True
                true_pending = True
                true_pose = record.pose
                out.write("# ")
                record.write(out)
            if (
                started
                and true_found
                and not transformation
                and is_pose
                and not record.true_pos
            ):
                true_start = true_pose
                real_start = record.pose
                out.write("# ")
                record.write(out)
                transformation = True
            if transformation and is_pose:
                if record.true_pos:
                    true_pending = True
                    true_pose = record.pose
                elif true_pending:
                    true_pending = False
                    real_delta = absolute_difference(record.pose, real_start)
                    true_delta = absolute_difference(true_pose, true_start)
                    ex = real_delta.x - true_delta.x
                    ey = real_delta.y - true_delta.y
                    eth = real_delta.theta - true_delta.theta
                    eth = math.atan2(math.sin(eth), math.cos(eth))
                    dist = math.hypot(ex, ey)
                    if not err:
                        out.write("# ERROR ")
                    out.write(
                        f"{_fixed(neff)} {_fixed(ex)} {_fixed(ey)} {_fixed(eth)}"
                        f" {_fixed(dist)} {_fixed(abs(eth))}\n"
                    )
                    total_error += dist
                    count += 1
            if not err:
                record.write(out)
        return total_error / count if count else math.nan