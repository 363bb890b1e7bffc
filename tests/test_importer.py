import pytest

from jee_tracker.executor import ToolCall, execute_tool_calls
from jee_tracker.exporter import export_logs_csv
from jee_tracker.importer import BackupFormatError, import_backup, import_logs_csv, parse_logs_csv


def test_invalid_json_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops")
    with pytest.raises(BackupFormatError):
        import_backup(path)


def test_backup_without_chapters_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"tests": []}')
    with pytest.raises(BackupFormatError):
        import_backup(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(BackupFormatError):
        import_backup(tmp_path / "nope.json")


def test_backup_with_bad_record_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"chapters": [{"name": "no id"}]}')
    with pytest.raises(BackupFormatError):
        import_backup(path)


def test_partial_backup_gets_empty_defaults(tmp_path):
    path = tmp_path / "min.json"
    path.write_text('{"chapters": [], "logs": [{"date": "2025-01-01", "physicsQ": 4}]}')
    state = import_backup(path)
    assert state.tests == []
    assert state.logs[0].physics_q == 4
    assert state.logs[0].id


def test_parse_logs_csv():
    text = (
        "Date,Physics,Chemistry,Mathematics,StudyTime,Remarks\n"
        '2025-11-02,20,10,5,120,"a, ""b"""\n'
        "\n"
        "2025-11-01,x,3,,45\n"
        "someday,1,1,1,1,\n"
    )
    logs = parse_logs_csv(text)
    assert [l.date for l in logs] == ["2025-11-02", "2025-11-01"]
    assert logs[0].remarks == 'a, "b"'
    assert (logs[1].physics_q, logs[1].chemistry_q, logs[1].math_q, logs[1].study_time) == (0, 3, 0, 45)
    assert logs[1].remarks == ""


def test_csv_export_then_import(tmp_path, state):
    path = export_logs_csv(state.logs, tmp_path)
    logs = import_logs_csv(path)
    assert [(l.date, l.physics_q, l.study_time, l.remarks) for l in logs] == [("2025-11-02", 20, 120, "")]


def test_non_text_fields_are_coerced_on_import(tmp_path):
    path = tmp_path / "numbers.json"
    path.write_text('{"chapters": [{"id": "x", "name": 123, "unit": 7}], "tests": [{"id": "t", "name": 9}]}')
    state = import_backup(path)
    assert state.chapters[0].name == "123"
    assert state.chapters[0].unit == "7"
    assert state.tests[0].name == "9"

    result = execute_tool_calls(state, [
        ToolCall("updateChapter", {"chapterName": "waves", "confidence": 50}),
        ToolCall("bulkUpdateChapters", {"filterUnit": "7", "updateUnit": "Optics"}),
        ToolCall("deleteItem", {"type": "test", "identifier": "w"}),
        ToolCall("updateChapter", {"chapterName": "12", "confidence": 50}),
    ])
    assert result.state.chapters[0].unit == "Optics"
    assert result.state.chapters[0].confidence == 50
    assert len(result.state.tests) == 1
