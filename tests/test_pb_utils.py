"""Unit tests for file helpers, summaries and formatting."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest

from pbreader.errors import MissingRequiredSection, WrongFormat
from pbreader.instance import OrdinalPB, build_instance
from pbreader.utils.formatting import (
    NO_BALLOTS,
    format_budget,
    format_int,
    format_vote_length,
)
from pbreader.utils.load_pb_file import read_document_text, split_lines
from pbreader.utils.pb_utils import (
    average_vote_length,
    compute_webpage_name,
    is_safe_filename,
    load_document,
    load_instance,
    parse_comments_from_meta,
    pb_folder,
    read_file_lines,
    summarize_instance,
    workspace_root,
)
from pbreader.utils.upload_security import is_allowed_extension, is_probably_text_bytes


def pb_from(text):
    return build_instance(read_document_text(text))


class TestPaths:

    def test_default_pb_folder(self, monkeypatch):
        monkeypatch.delenv("PB_FILES_DIR", raising=False)
        assert pb_folder() == workspace_root() / "pb_files"

    def test_absolute_pb_folder(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PB_FILES_DIR", str(tmp_path))
        assert pb_folder() == tmp_path

    def test_relative_pb_folder(self, monkeypatch):
        monkeypatch.setenv("PB_FILES_DIR", "data/pb")
        assert pb_folder() == workspace_root() / "data" / "pb"

    @pytest.mark.parametrize(
        "name, ok",
        [
            ("poland_warszawa_2023.pb", True),
            ("notes.txt", False),
            ("../secret.pb", False),
            ("/etc/x.pb", False),
            ("dir/x.pb", False),
            ("dir\\x.pb", False),
        ],
    )
    def test_is_safe_filename(self, name, ok):
        assert is_safe_filename(name) is ok


class TestLoading:

    def test_read_file_lines_drops_bom_and_newlines(self, tmp_path):
        path = tmp_path / "x.pb"
        path.write_bytes("\ufeffMETA\r\nkey;value\r\n".encode("utf-8"))
        assert read_file_lines(path) == ["META", "key;value"]

    def test_read_file_lines_rejects_latin1(self, tmp_path):
        path = tmp_path / "latin1.pb"
        path.write_bytes("META\nkey;value\ndescription;Café\n".encode("latin-1"))
        with pytest.raises(WrongFormat) as exc:
            read_file_lines(path)
        assert "UTF-8" in exc.value.reason
        assert isinstance(exc.value.__cause__, UnicodeDecodeError)

    def test_only_newline_breaks_lines(self):
        assert split_lines("a\x85b\r\nc d\x0ce\n\nf") == [
            "a\x85b",
            "c d\x0ce",
            "",
            "f",
        ]
        assert split_lines("a\r\r\n") == ["a\r"]
        assert split_lines("") == []

    def test_file_and_text_parse_alike(self, tmp_path, approval_text):
        text = approval_text.replace(
            "description;Example district", "description;Example\x85district north"
        )
        path = tmp_path / "odd_breaks.pb"
        path.write_bytes(text.encode("utf-8"))
        from_file = load_document(path)
        from_text = read_document_text(text)
        assert from_file == from_text
        assert set(from_text) == {"META", "PROJECTS", "VOTES"}
        assert len(from_text["META"]) == 12
        assert load_instance(path).meta("description") == "Example\x85district north"

    def test_load_instance(self, tmp_path, ordinal_text):
        path = tmp_path / "o.pb"
        path.write_text(ordinal_text, encoding="utf-8")
        assert isinstance(load_instance(path), OrdinalPB)
        assert load_document(path) == read_document_text(ordinal_text)

    def test_load_errors_propagate(self, tmp_path):
        path = tmp_path / "bad.pb"
        path.write_text("META\nkey\n", encoding="utf-8")
        with pytest.raises(WrongFormat):
            load_instance(path)
        path.write_text("META\nkey;value\nbudget;1\n", encoding="utf-8")
        with pytest.raises(MissingRequiredSection):
            load_instance(path)


class TestSummaries:

    def test_comments(self, approval_text):
        assert parse_comments_from_meta(pb_from(approval_text)) == [
            "first remark",
            "second remark",
        ]

    def test_comment_without_markers(self, approval_text):
        text = approval_text.replace(
            "comment;#1: first remark #2: second remark.", "comment;Just one."
        )
        assert parse_comments_from_meta(pb_from(text)) == ["Just one"]

    def test_no_comment(self, ordinal_text):
        assert parse_comments_from_meta(pb_from(ordinal_text)) == []

    def test_webpage_name(self, approval_text):
        assert compute_webpage_name(pb_from(approval_text)) == (
            "Poland_Warszawa_2023_Bemowo",
            "Poland",
            "Warszawa",
            "2023",
            "Bemowo",
        )

    def test_average_vote_length(self, approval_text):
        assert average_vote_length(pb_from(approval_text)) == pytest.approx(1.5)

    def test_summary_approval(self, approval_text):
        summary = summarize_instance(pb_from(approval_text), "poland_warszawa_2023.pb")
        assert summary["title"] == "Poland Warszawa 2023 Bemowo"
        assert summary["budget"] == 1000
        assert summary["num_projects"] == 3
        assert summary["vote_rows"] == 4
        assert summary["vote_type"] == "approval"
        assert summary["rule"] == "greedy"
        assert summary["currency"] == "PLN"
        assert "scoring_fn" not in summary

    def test_summary_ordinal(self, ordinal_text):
        summary = summarize_instance(pb_from(ordinal_text), "some_file.pb")
        assert summary["title"] == "some file"
        assert summary["rule"] == "unknown"
        assert summary["rule_raw"] == "Condorcet"
        assert (summary["min_length"], summary["max_length"]) == (2, 3)
        assert summary["scoring_fn"] == "none"


class TestFormatting:

    def test_format_int(self):
        assert format_int(1234567) == "1 234 567"
        assert format_int(-12000) == "-12 000"
        assert format_int(999) == "999"
        assert format_int(1000, sep=",") == "1,000"

    def test_format_budget(self):
        assert format_budget("PLN", 1000) == "1 000 PLN"
        assert format_budget("", 50) == "50"

    def test_format_vote_length(self):
        assert format_vote_length(1.5) == "1.50 projects"
        assert format_vote_length(2, digits=1) == "2.0 projects"
        assert format_vote_length(None) == NO_BALLOTS


class TestUploadSecurity:

    def test_allowed_extension(self):
        assert is_allowed_extension("File.PB")
        assert not is_allowed_extension("file.csv")

    def test_text_detection(self):
        assert is_probably_text_bytes("META\nkey;value\nopis;Łódź\n".encode("utf-8"))
        assert not is_probably_text_bytes(bytes(range(0, 32)) * 10)

    def test_nul_byte_rejects(self):
        assert not is_probably_text_bytes(b"META\nkey;value\n" * 50 + b"\x00")

    def test_tabs_and_crlf_are_text(self):
        assert is_probably_text_bytes(b"META\r\nkey;value\r\nnote;a\tb\r\n")
        assert is_probably_text_bytes(b"")

    def test_stray_controls(self):
        assert is_probably_text_bytes(b"x" * 200 + b"\x0c")
        assert not is_probably_text_bytes(b"META\x1b\x1b\x1b")
