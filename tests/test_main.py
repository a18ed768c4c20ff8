import argparse
import csv
import logging
from datetime import datetime

import pytest
from colorama import Fore, Style

import media_organizer.main as main_module
from media_organizer.main import parse_args, parse_when, run
from media_organizer.metadata.extract import NativeMetadataStore

from conftest import MemoryStore


@pytest.fixture(autouse=True)
def restore_logging():
    """run() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_tools(monkeypatch):
    """Pretends exiftool is installed and swaps in an in-memory store."""
    store = MemoryStore()
    monkeypatch.setattr(main_module, "require_tool", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(main_module, "build_store", lambda: store)
    return store


def test_parse_when():
    assert parse_when("2022-01-01") == datetime(2022, 1, 1).timestamp()
    assert parse_when("Jun 15 2022 10:30") == datetime(2022, 6, 15, 10, 30).timestamp()
    assert parse_when("@1640390400") == 1640390400
    with pytest.raises(argparse.ArgumentTypeError):
        parse_when("not a date at all")


def test_parse_args_defaults():
    args = parse_args(["move", "src", "dst"])
    assert args.command == "move"
    assert args.collision == "counter"
    assert args.kind == "all"
    assert not args.recursive


def test_bad_date_option_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        parse_args(["repair", "dir", "--after", "yesterday-ish?"])
    assert exc.value.code == 2


def test_build_store():
    assert isinstance(main_module.build_store(), NativeMetadataStore)


def test_repair_command(tmp_path, make_jpeg, fake_tools):
    path = make_jpeg(tmp_path / "1640390400.jpg")
    make_jpeg(tmp_path / "holiday.jpg")
    report_csv = tmp_path / "report.csv"

    code = run(["repair", str(tmp_path), "-q", "--report-csv", str(report_csv)])

    assert code == 0
    assert path.stat().st_mtime == 1640390400
    with open(report_csv, newline="", encoding="utf-8") as f:
        statuses = sorted(row[1] for row in list(csv.reader(f))[1:])
    assert statuses == ["skipped", "updated"]


def test_repair_with_move(tmp_path, make_jpeg, fake_tools):
    src = tmp_path / "in"
    make_jpeg(src / "1640390400.jpg")
    target = tmp_path / "sorted"

    code = run(["repair", str(src), "-m", str(target), "-q"])

    taken = datetime.fromtimestamp(1640390400)
    assert code == 0
    assert (target / taken.strftime("%Y") / taken.strftime("%m") / "1640390400.jpg").exists()


def test_move_command(tmp_path, make_jpeg, fake_tools):
    src = make_jpeg(tmp_path / "in" / "a.jpg")
    fake_tools.fields["a.jpg"] = {"DateTimeOriginal": "2023:05:15 10:30:00"}
    target = tmp_path / "sorted"

    code = run(["move", str(src), str(target), "-q"])

    assert code == 0
    assert (target / "2023" / "05" / "a.jpg").exists()


def test_missing_root_is_fatal(tmp_path, fake_tools):
    assert run(["repair", str(tmp_path / "missing"), "-q"]) == 1
    assert run(["move", str(tmp_path / "missing"), str(tmp_path / "t"), "-q"]) == 1


def test_missing_exiftool_is_fatal(tmp_path, monkeypatch, make_jpeg):
    import media_organizer.metadata.store as store_module
    monkeypatch.setattr(store_module.shutil, "which", lambda name: None)
    path = make_jpeg(tmp_path / "1640390400.jpg")
    before = path.stat().st_mtime

    assert run(["repair", str(tmp_path), "-q"]) == 1
    assert path.stat().st_mtime == before


def test_color_formatter():
    formatter = main_module.ColorFormatter("%(levelname)s %(message)s")

    def record(level):
        return logging.LogRecord("media", level, __file__, 1, "boom", None, None)

    assert formatter.format(record(logging.ERROR)) == f"{Fore.RED}ERROR boom{Style.RESET_ALL}"
    assert formatter.format(record(logging.INFO)) == "INFO boom"
