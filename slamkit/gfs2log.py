"""Convert a trace log into a log of the best particle's corrected path."""

from __future__ import annotations

import sys
from typing import List, Optional

from .gfsreader import RecordList

_USAGE = (
    "usage gfs2log [-err] [-neff] [-part] [-odom] <infilename> <outfilename>\n"
    "  -odom : dump raw odometry in ODOM message instead of interpolated corrected one"
)
_FLAGS = ("-err", "-neff", "-part", "-odom")


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
            records = RecordList().read(stream)
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
        average = records.print_path(out, best, flags["-err"], flags["-odom"])
        if flags["-part"]:
            records.print_last_particles(out)
    if flags["-err"]:
        print(f"average error{average:g}")
    return 0


if __name__ == "__main__":
    sys.exit(main())