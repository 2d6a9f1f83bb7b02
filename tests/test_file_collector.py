"""Tests for command-line file collection."""
import pytest

from batch_uploader.orchestrator.file_collector import FileCollector


def test_collects_folder_sorted_and_skips_hidden(tmp_path):
    folder = tmp_path / "site"
    (folder / "sub").mkdir(parents=True)
    (folder / ".git").mkdir()
    (folder / "b.png").write_bytes(b"b")
    (folder / "a.png").write_bytes(b"a")
    (folder / "sub" / "c.pdf").write_bytes(b"c")
    (folder / ".DS_Store").write_bytes(b"")
    (folder / ".git" / "HEAD").write_bytes(b"ref")

    files = FileCollector.collect_files([folder])

    assert [f.relative_to(folder).as_posix() for f in files] == ["a.png", "b.png", "sub/c.pdf"]


def test_explicit_files_keep_given_order(tmp_path):
    first = tmp_path / "z.txt"
    second = tmp_path / "a.txt"
    first.write_text("z")
    second.write_text("a")

    assert FileCollector.collect_files([first, second]) == [first, second]


def test_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileCollector.collect_files([tmp_path / "nope.png"])


def test_collect_candidates_reads_payloads(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    candidates = FileCollector.collect_candidates([path])

    assert len(candidates) == 1
    assert candidates[0].filename == "notes.txt"
    assert candidates[0].media_type == "text/plain"
    assert candidates[0].size == 5
