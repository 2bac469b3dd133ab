import json
from pathlib import Path

from selected_image_export.core import DirectoryProcess
from selected_image_export.models import ErrorLevel, ProcessError


def test_replace_variables(tmp_path: Path) -> None:
    process = DirectoryProcess(tmp_path, process_id=7, title="book_1", project_name="Archive")
    assert process.replace_variables("/export/{projectname}/{processtitle}-{processid}") == "/export/Archive/book_1-7"


def test_image_folder_lookup(tmp_path: Path) -> None:
    process = DirectoryProcess(tmp_path, process_id=7, title="book_1")
    assert process.get_image_folder("media") is None

    (tmp_path / "images" / "master").mkdir(parents=True)
    (tmp_path / "images" / "book_1_media").mkdir()
    assert process.get_image_folder("media") == tmp_path / "images" / "book_1_media"
    assert process.get_image_folder("master") == tmp_path / "images" / "master"


def test_properties_from_file(tmp_path: Path) -> None:
    (tmp_path / "properties.json").write_text(json.dumps({"selected": '{"a.jpg":1}', "count": 3}), encoding="utf-8")
    process = DirectoryProcess(tmp_path, process_id=7, title="book_1")

    assert process.get_property("selected") == '{"a.jpg":1}'
    assert process.get_property("count") == "3"
    assert process.get_property("missing") is None


def test_journal(tmp_path: Path) -> None:
    process = DirectoryProcess(tmp_path, process_id=7, title="book_1", properties={})
    assert process.read_journal() == []

    process.add_journal_entry(ProcessError(code="W-MISSING-IMAGE", level=ErrorLevel.RECOVERABLE, message="gone"))

    entries = process.read_journal()
    assert entries[0]["code"] == "W-MISSING-IMAGE"
    assert entries[0]["level"] == "W"
    assert entries[0]["process_id"] == 7
