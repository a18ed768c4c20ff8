import os
from datetime import datetime

import pytest

from media_organizer import config
from media_organizer.models import DateWindow
from media_organizer.scanning.filesystem import CandidateScanner
from media_organizer.scanning.mime import classify

from conftest import set_mtime


def test_classify_by_content_not_extension(tmp_path, make_jpeg, make_mp4):
    jpeg = make_jpeg(tmp_path / "renamed.dat")
    video = make_mp4(tmp_path / "clip.bin")
    fake = tmp_path / "fake.jpg"
    fake.write_text("Dummy video file")
    empty = tmp_path / "empty.mp4"
    empty.touch()

    assert classify(jpeg) == config.KIND_IMAGE
    assert classify(video) == config.KIND_VIDEO
    assert classify(fake) == config.KIND_UNSUPPORTED
    assert classify(empty) == config.KIND_UNSUPPORTED


def test_classify_missing_file_is_unsupported(tmp_path):
    assert classify(tmp_path / "gone.jpg") == config.KIND_UNSUPPORTED


def test_scanner_depth(tmp_path):
    (tmp_path / "top.jpg").write_text("x")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "deep.jpg").write_text("x")

    flat = list(CandidateScanner(recursive=False).scan(tmp_path))
    deep = list(CandidateScanner(recursive=True).scan(tmp_path))

    assert flat == [tmp_path / "top.jpg"]
    assert set(deep) == {tmp_path / "top.jpg", sub / "deep.jpg"}


def test_scanner_patterns_are_case_insensitive(tmp_path):
    for name in ("A.JPG", "b.jpeg", "c.Mp4", "notes.txt"):
        (tmp_path / name).write_text("x")

    scanner = CandidateScanner(patterns=config.KIND_PATTERNS['all'])
    names = {p.name for p in scanner.scan(tmp_path)}

    assert names == {"A.JPG", "b.jpeg", "c.Mp4"}


def test_scanner_kind_patterns(tmp_path):
    for name in ("a.jpg", "b.mov"):
        (tmp_path / name).write_text("x")

    images = {p.name for p in CandidateScanner(patterns=config.KIND_PATTERNS['image']).scan(tmp_path)}
    videos = {p.name for p in CandidateScanner(patterns=config.KIND_PATTERNS['video']).scan(tmp_path)}

    assert images == {"a.jpg"}
    assert videos == {"b.mov"}


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_scanner_skips_symlinks(tmp_path):
    real = tmp_path / "real.jpg"
    real.write_text("x")
    (tmp_path / "link.jpg").symlink_to(real)

    assert list(CandidateScanner().scan(tmp_path)) == [real]


def test_date_window_filters_by_mtime(tmp_path):
    dates = {
        "new_year.jpg": datetime(2022, 1, 1),
        "mid_year.jpg": datetime(2022, 6, 15),
        "next_year.jpg": datetime(2023, 1, 1),
    }
    for name, dt in dates.items():
        p = tmp_path / name
        p.write_text("x")
        set_mtime(p, dt)

    window = DateWindow(after=datetime(2022, 1, 1).timestamp(), before=datetime(2022, 12, 31).timestamp())
    found = [p.name for p in CandidateScanner(window=window).scan(tmp_path)]

    assert found == ["mid_year.jpg"]


def test_date_window_bounds():
    window = DateWindow(after=100, before=200)
    assert not window.contains(100)
    assert window.contains(101)
    assert window.contains(200)
    assert not window.contains(201)
    assert DateWindow().contains(0)
    assert DateWindow(before=200).contains(5)


def test_scanner_excludes_marker_paths(tmp_path):
    thumbs = tmp_path / "@eaDir" / "SYNOPHOTO_THUMB_XL.jpg"
    thumbs.parent.mkdir()
    thumbs.write_text("x")
    keep = tmp_path / "keep.jpg"
    keep.write_text("x")

    scanner = CandidateScanner(recursive=True, exclude_substrings=[config.THUMBNAIL_MARKER])

    assert list(scanner.scan(tmp_path)) == [keep]
