from __future__ import annotations

import os

import pytest

from sftp_sender import errors
from sftp_sender.autosend import find_numeric_token, locate_file_sequence


@pytest.mark.unit
def test_locates_full_sequence_in_order(numbered_files) -> None:
    created = numbered_files(range(162, 167))
    found = locate_file_sequence(str(created[0]), 5)
    assert found == created
    assert all(p.is_absolute() for p in found)


@pytest.mark.unit
def test_missing_member_fails_with_index(numbered_files, tmp_path) -> None:
    numbered_files([162, 163, 165, 166])
    with pytest.raises(errors.SequenceMemberMissing) as exc:
        locate_file_sequence(str(tmp_path / "worker162.txt"), 5)
    assert exc.value.index == 2
    assert exc.value.path == tmp_path / "worker164.txt"


@pytest.mark.unit
def test_relative_base_path_is_resolved(numbered_files, tmp_path, monkeypatch) -> None:
    numbered_files([7, 8], directory=tmp_path / "out")
    monkeypatch.chdir(tmp_path)
    found = locate_file_sequence(os.path.join("out", "worker7.txt"), 2)
    assert found == [tmp_path / "out" / "worker7.txt", tmp_path / "out" / "worker8.txt"]


@pytest.mark.unit
def test_count_must_be_positive(numbered_files) -> None:
    (base,) = numbered_files([1])
    with pytest.raises(errors.InvalidCount):
        locate_file_sequence(str(base), 0)


@pytest.mark.unit
def test_base_file_must_exist(tmp_path) -> None:
    with pytest.raises(errors.BaseFileNotFound):
        locate_file_sequence(str(tmp_path / "worker1.txt"), 1)


@pytest.mark.unit
def test_filename_without_digits(tmp_path) -> None:
    base = tmp_path / "payload.txt"
    base.write_text("x")
    with pytest.raises(errors.NoNumericToken, match="payload.txt"):
        locate_file_sequence(str(base), 1)


@pytest.mark.unit
def test_digits_in_directory_name_are_ignored(numbered_files, tmp_path) -> None:
    created = numbered_files([3, 4], prefix="part-", suffix=".bin", directory=tmp_path / "run42")
    assert locate_file_sequence(str(created[0]), 2) == created


@pytest.mark.unit
def test_only_first_digit_run_increments(numbered_files, tmp_path) -> None:
    created = numbered_files([10, 11], prefix="job", suffix="_v2.tar.gz")
    assert locate_file_sequence(str(created[0]), 2) == created


@pytest.mark.unit
def test_leading_zeros_are_not_preserved(tmp_path) -> None:
    (tmp_path / "worker007.txt").write_text("a")
    (tmp_path / "worker8.txt").write_text("b")
    found = locate_file_sequence(str(tmp_path / "worker007.txt"), 2)
    assert [p.name for p in found] == ["worker007.txt", "worker8.txt"]


@pytest.mark.unit
def test_numeric_token_split() -> None:
    token = find_numeric_token("worker162.txt")
    assert (token.prefix, token.value, token.suffix) == ("worker", 162, ".txt")
    assert (token.start, token.end) == (6, 9)
    assert token.render(163) == "worker163.txt"


@pytest.mark.unit
def test_lookup_is_repeatable(numbered_files) -> None:
    created = numbered_files(range(1, 4))
    assert locate_file_sequence(str(created[0]), 3) == locate_file_sequence(str(created[0]), 3)


@pytest.mark.unit
def test_overlong_base_name_is_reported_missing(tmp_path) -> None:
    base = tmp_path / ("w1" + "x" * 300 + ".txt")
    with pytest.raises(errors.BaseFileNotFound):
        locate_file_sequence(str(base), 1)


@pytest.mark.unit
def test_overlong_member_name_is_reported_missing(tmp_path) -> None:
    # 255 characters; the next member needs 256
    base = tmp_path / ("w9" + "x" * 249 + ".txt")
    base.write_text("a")
    with pytest.raises(errors.SequenceMemberMissing) as exc:
        locate_file_sequence(str(base), 2)
    assert exc.value.index == 1


@pytest.mark.unit
def test_null_byte_in_path(tmp_path) -> None:
    with pytest.raises(errors.PathResolutionError, match="embedded null byte"):
        locate_file_sequence(str(tmp_path / "worker1.txt") + "\x00", 1)
