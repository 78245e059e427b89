import json

import pytest

from feed_classifier.data import load_feed, write_json, write_json_files
from feed_classifier.errors import InputFormatError, OutputWriteError


def test_load_feed_roundtrip(tmp_path):
    path = tmp_path / "feed.json"
    write_json(path, [{"id": 1, "content": "héllo"}])
    assert load_feed(path) == [{"id": 1, "content": "héllo"}]
    assert "héllo" in path.read_text(encoding="utf-8")


@pytest.mark.parametrize("payload", [{"items": []}, "feed", [{"id": 1}, "oops"]])
def test_load_feed_rejects_non_array_of_objects(tmp_path, payload):
    path = tmp_path / "feed.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(InputFormatError):
        load_feed(path)


def test_load_feed_missing_file(tmp_path):
    with pytest.raises(InputFormatError):
        load_feed(tmp_path / "absent.json")


def test_write_json_creates_parent_dirs(tmp_path):
    path = tmp_path / "a" / "b" / "stats.json"
    write_json(path, {"total": 0})
    assert path.read_text(encoding="utf-8") == '{\n  "total": 0\n}'


def test_write_json_under_a_file_raises_output_write_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(OutputWriteError):
        write_json(blocker / "out.json", [])


def test_write_json_files_writes_nothing_when_a_directory_fails(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    out = tmp_path / "out.json"
    with pytest.raises(OutputWriteError):
        write_json_files([(out, [{"id": 1}]), (blocker / "stats.json", {"total": 1})])
    assert not out.exists()
