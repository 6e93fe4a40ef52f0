import io

from slamkit.gfs2neff import main, neff_series

TRACE = "FRAME 3 0.1 0.2\nNEFF 25.5\nNEFF 20\nFRAME 4\nNEFF 10\nLASER_READING 0\n"


def test_series_tags_frames():
    assert list(neff_series(io.StringIO(TRACE))) == [(3, 25.5), (3, 20.0), (4, 10.0)]


def test_neff_before_any_frame_uses_frame_zero():
    assert list(neff_series(io.StringIO("NEFF 5\n"))) == [(0, 5.0)]


def test_empty_input_gives_nothing():
    assert list(neff_series(io.StringIO("\n\n"))) == []


def test_main_writes_pairs(tmp_path):
    src = tmp_path / "run.gfs"
    src.write_text(TRACE)
    dst = tmp_path / "neff.txt"
    assert main([str(src), str(dst)]) == 0
    assert dst.read_text().splitlines() == ["3 25.5", "3 20", "4 10"]


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage gfs2neff" in capsys.readouterr().out


def test_main_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "none"), str(tmp_path / "out")]) == 1
    assert "could read file" in capsys.readouterr().out