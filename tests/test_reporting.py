import csv
from pathlib import Path

from media_organizer.reporting import RunReport


def test_summary_counts():
    report = RunReport()
    report.record(Path("a.jpg"), "updated")
    report.record(Path("b.jpg"), "skipped", "invalid filename: b.jpg")
    report.record(Path("c.jpg"), "updated")

    assert report.count("updated") == 2
    assert report.count("failed") == 0
    assert report.summary() == "Processed 3 files: 2 updated, 1 skipped"


def test_empty_summary():
    assert RunReport().summary() == "Processed 0 files"


def test_write_csv(tmp_path):
    report = RunReport()
    report.record(Path("/src/a.jpg"), "moved", "DateTimeOriginal", destination=Path("/dst/2023/05/a.jpg"))
    report.record(Path("/src/b.txt"), "skipped", "unsupported (unsupported)")

    output_csv = tmp_path / "report.csv"
    report.write_csv(output_csv)

    with open(output_csv, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    assert rows[0] == ["Source Path", "Status", "Destination Path", "Notes"]
    assert rows[1] == [str(Path("/src/a.jpg")), "moved", str(Path("/dst/2023/05/a.jpg")), "DateTimeOriginal"]
    assert rows[2][1:3] == ["skipped", ""]
