"""Extract the effective sample size per frame from a trace log."""

from __future__ import annotations

import sys
from typing import Iterable, Iterator, List, Optional, Tuple


def _number(tokens: List[str], kind):
    try:
        return kind(tokens[1])
    except (IndexError, ValueError):
        return kind(0)


def neff_series(stream: Iterable[str]) -> Iterator[Tuple[int, float]]:
    """Yield ``(frame, neff)`` for every NEFF line, tagged with the last FRAME seen."""
    frame = 0
    for line in stream:
        tokens = line.split()
        if not tokens:
            continue
        if tokens[0] == "FRAME":
            frame = _number(tokens, int)
        elif tokens[0] == "NEFF":
            yield frame, _number(tokens, float)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the extractor; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("usage gfs2neff <infilename> <nefffilename>")
        return 1
    try:
        source = open(args[0])
    except OSError:
        print("could read file ")
        return 1
    with source:
        try:
            out = open(args[1], "w")
        except OSError:
            print("could write file ")
            return 1
        with out:
            for frame, neff in neff_series(source):
                out.write(f"{frame} {neff:g}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())