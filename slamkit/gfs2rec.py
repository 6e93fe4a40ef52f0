"""Convert a trace log into a recorder-style path log of the best particle."""

from __future__ import annotations

import math
import sys
from dataclasses import replace
from typing import Iterable, List, Optional, TextIO

from .geometry import OrientedPoint
from .gfsreader import (
    CommentRecord,
    LaserRecord,
    NeffRecord,
    OdometryRecord,
    PoseRecord,
    Record,
    RecordList,
    ResampleRecord,
    ScanMatchRecord,
    parse_record,
)

_USAGE = "usage gfs2rec [-err] <infilename> <outfilename>"
_FLAGS = ("-err", "-neff")
_KEYWORDS = frozenset(
    {
        "LASER_READING",
        "ODO_UPDATE",
        "SM_UPDATE",
        "SIMULATOR_POS",
        "RESAMPLE",
        "NEFF",
        "COMMENT",
    }
)


def _read_records(stream: Iterable[str]) -> RecordList:
    """Read the record types this format understands, skipping every other line."""
    records = RecordList()
    for line in stream:
        tokens = line.split(maxsplit=1)
        if not tokens or tokens[0] not in _KEYWORDS:
            continue
        record = parse_record(line)
        if record is not None:
            records.append(record)
    return records


def _pose_text(pose: OrientedPoint) -> str:
    return f"{pose.x * 100:g} {pose.y * 100:g} {180 / math.pi * pose.theta:g}"


def format_record(record: Record) -> str:
    """Text of a record in the recorder format; records without one give ``""``."""
    if isinstance(record, CommentRecord):
        return f"#GFS_COMMENT: {record.text}\n"
    if isinstance(record, PoseRecord):
        label = "POS-CORR" if record.true_pos else "POS "
        return f"{label}0 0: {_pose_text(record.pose)}\n"
    if isinstance(record, NeffRecord):
        return f"NEFF {record.neff:g}\n"
    if isinstance(record, LaserRecord):
        dim = record.dim
        ranges = "".join(f" {r * 100:g}" for r in record.readings[:dim])
        return (
            f"POS 0 0: {_pose_text(record.pose)}\n"
            f"LASER-RANGE  0 0 0 {dim} 180. : {ranges}\n"
        )
    return ""


def _reconstruct(records: RecordList, index: int) -> List[Record]:
    current = index
    pose = OrientedPoint()
    path: List[Record] = []
    for record in reversed(records):
        if isinstance(record, (NeffRecord, CommentRecord)):
            path.append(replace(record))
        elif isinstance(record, ScanMatchRecord):
            pose = record.poses[current]
            path.append(PoseRecord(pose=pose))
        elif isinstance(record, OdometryRecord):
            pose = record.poses[current]
            path.append(PoseRecord(pose=pose, time=record.time))
        elif isinstance(record, PoseRecord):
            path.append(replace(record))
        elif isinstance(record, LaserRecord):
            path.append(replace(record, pose=pose))
        elif isinstance(record, ResampleRecord):
            current = record.indexes[current]
            path.append(replace(record))
    path.reverse()
    return path


def write_rec_path(
    records: RecordList, out: TextIO, index: int, err: bool = False
) -> None:
    """Write the path of particle ``index`` with its error against the true poses.

    With ``err`` only the error lines and the markers are written.
    """
    started = False
    true_found = False
    transformation = False
    true_pending = False
    ox = oy = rxx = rxy = ryx = ryy = rth = 0.0
    true_pose = OrientedPoint()
    current_pose = OrientedPoint()
    neff = 0.0
    count = 0
    for record in _reconstruct(records, index):
        if isinstance(record, NeffRecord):
            if records.sample_size is None:
                records.best_index()
            size = records.sample_size
            neff = record.neff / size if size else math.inf
        started = started or isinstance(record, LaserRecord)
        is_pose = isinstance(record, PoseRecord)
        if started and not true_found and is_pose and record.true_pos:
            true_found = True
            true_pending = True
            true_pose = record.pose
            out.write("# " + format_record(record))
        if started and true_found and not transformation and is_pose and not record.true_pos:
            pose = record.pose
            rth = true_pose.theta - pose.theta
            s, c = math.sin(rth), math.cos(rth)
            rxx = ryy = c
            rxy, ryx = -s, s
            ox = true_pose.x - (rxx * pose.x + rxy * pose.y)
            oy = true_pose.y - (ryx * pose.x + ryy * pose.y)
            transformation = True
            out.write("# " + format_record(record))
        if isinstance(record, ResampleRecord):
            out.write(
                f"MARK-POS 0 0: {current_pose.x * 100:g} {current_pose.y * 100:g} 0 {count}\n"
            )
            count += 1
        if transformation and is_pose:
            if record.true_pos:
                true_pending = True
                true_pose = record.pose
            elif true_pending:
                true_pending = False
                pose = record.pose
                eth = true_pose.theta - pose.theta - rth
                ex = true_pose.x - (ox + rxx * pose.x + rxy * pose.y)
                ey = true_pose.y - (oy + ryx * pose.x + ryy * pose.y)
                eth = math.atan2(math.sin(eth), math.cos(eth))
                if not err:
                    out.write("# ERROR ")
                out.write(
                    f"{neff:g} {ex:g} {ey:g} {eth:g} {math.hypot(ex, ey):g} {abs(eth):g}\n"
                )
        if is_pose:
            current_pose = record.pose
        if not err:
            out.write(format_record(record))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the converter; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(_USAGE)
        return 1
    flags = {}
    for flag in _FLAGS:
        flags[flag] = bool(args) and args[0] == flag
        if flags[flag]:
            args.pop(0)
    if len(args) < 2:
        print(_USAGE)
        return 1
    in_name, out_name = args[0], args[1]

    try:
        with open(in_name) as stream:
            records = _read_records(stream)
    except OSError:
        print("could read file ")
        return 1

    try:
        best = records.best_index()
    except ValueError as exc:
        print(exc)
        return 1
    print()
    print(f"best index = {best}")

    try:
        out = open(out_name, "w")
    except OSError:
        print("could write file ")
        return 1
    with out:
        write_rec_path(records, out, best, flags["-err"])
    return 0


if __name__ == "__main__":
    sys.exit(main())