"""Tests for the tabular parser."""

import pytest

from tabletalk.core.tabular_parser import TabularDataset, file_extension, parse
from tabletalk.exceptions import EmptyFileError, ParseError, UnsupportedFormatError


class TestParse:
    def test_two_rows_with_header(self):
        ds = parse(b"id,name\n1,Alice\n2,Bob\n", "people.csv")

        assert ds.columns == ("id", "name")
        assert ds.rows == ({"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"})
        assert ds.row_count == 2

    def test_blank_lines_are_skipped(self):
        ds = parse(b"\n\nid,name\n\n1,Alice\n   \n2,Bob\n\n", "people.csv")

        assert ds.columns == ("id", "name")
        assert ds.row_count == 2

    def test_short_rows_are_padded_and_extra_fields_dropped(self):
        ds = parse(b"a,b,c\n1\n1,2,3,4,5\n", "x.csv")

        assert ds.rows[0] == {"a": "1", "b": "", "c": ""}
        assert ds.rows[1] == {"a": "1", "b": "2", "c": "3"}

    def test_values_and_columns_are_trimmed(self):
        ds = parse(b" id , name \n 1 ,  Alice \n", "x.csv")

        assert ds.columns == ("id", "name")
        assert ds.rows[0] == {"id": "1", "name": "Alice"}

    def test_tab_delimited_when_header_has_tab(self):
        ds = parse(b"region\tsales\nNorth\t1,200\n", "report.xlsx")

        assert ds.columns == ("region", "sales")
        assert ds.rows[0] == {"region": "North", "sales": "1,200"}

    def test_quoted_fields_keep_commas(self):
        ds = parse(b'city,note\nParis,"big, old"\n', "x.csv")

        assert ds.rows[0]["note"] == "big, old"

    def test_utf8_bom_is_stripped(self):
        ds = parse("\ufeffid,name\n1,Zoë\n".encode("utf-8"), "x.csv")

        assert ds.columns == ("id", "name")
        assert ds.rows[0]["name"] == "Zoë"

    def test_crlf_line_endings(self):
        ds = parse(b"id,name\r\n1,Alice\r\n", "x.csv")

        assert ds.rows == ({"id": "1", "name": "Alice"},)

    def test_header_only_gives_zero_rows(self):
        ds = parse(b"id,name\n", "x.csv")

        assert ds.columns == ("id", "name")
        assert ds.row_count == 0
        assert ds.rows == ()

    def test_duplicate_columns_later_value_wins(self):
        ds = parse(b"a,a,b\n1,2,3\n", "x.csv")

        assert ds.duplicate_columns == ["a"]
        assert ds.rows[0] == {"a": "2", "b": "3"}

    def test_extension_is_case_insensitive(self):
        ds = parse(b"id\n1\n", "DATA.CSV")

        assert ds.row_count == 1

    def test_rows_only_use_known_columns(self):
        ds = parse(b"x,y\n1,2,3\n4\n,\n", "x.csv")

        assert ds.row_count == len(ds.rows)
        for row in ds.rows:
            assert set(row) <= set(ds.columns)

    def test_rows_are_read_only(self):
        ds = parse(b"id,name\n1,Alice\n", "a.csv")

        with pytest.raises(TypeError):
            ds.rows[0]["name"] = "Mallory"
        assert ds.rows[0]["name"] == "Alice"

    def test_same_bytes_same_dataset(self):
        content = b"id,name\n1,Alice\n2,Bob\n"

        assert parse(content, "a.csv") == parse(content, "a.csv")


class TestParseErrors:
    def test_empty_file(self):
        with pytest.raises(EmptyFileError) as exc_info:
            parse(b"", "empty.csv")

        assert exc_info.value.code == "EMPTY_FILE"
        assert exc_info.value.status_code == 400

    def test_whitespace_only_file(self):
        with pytest.raises(EmptyFileError):
            parse(b"\n  \n\t\n", "blank.csv")

    @pytest.mark.parametrize("name", ["notes.txt", "archive.zip", "README", ""])
    def test_unsupported_extension(self, name):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            parse(b"id\n1\n", name)

        assert exc_info.value.status_code == 415
        assert exc_info.value.details["supported"] == ["csv", "xls", "xlsx"]

    def test_parse_errors_share_a_base(self):
        assert issubclass(EmptyFileError, ParseError)
        assert issubclass(UnsupportedFormatError, ParseError)


class TestDataset:
    def test_row_count_must_match_rows(self):
        with pytest.raises(ValueError):
            TabularDataset(columns=("a",), rows=({"a": "1"},), row_count=2)

    def test_file_extension(self):
        assert file_extension("sales.Q1.XLSX") == "xlsx"
        assert file_extension("noext") is None
