"""Tests for bk_csv.tokenizer."""

from src.bk_csv.tokenizer import tokenize


def _rows(text: str) -> list[list[str]]:
    return list(tokenize(text))


class TestTokenize:
    def test_simple_rows(self) -> None:
        assert _rows("a,b,c\n1,2,3\n") == [["a", "b", "c"], ["1", "2", "3"]]

    def test_crlf_and_no_trailing_newline(self) -> None:
        assert _rows("a,b\r\n1,2") == [["a", "b"], ["1", "2"]]

    def test_unquoted_fields_trimmed(self) -> None:
        assert _rows("  a , b  ,c\n") == [["a", "b", "c"]]

    def test_quoted_fields_kept_verbatim(self) -> None:
        assert _rows('" a ",b\n') == [[" a ", "b"]]

    def test_quoted_comma_and_newline(self) -> None:
        assert _rows('"Team A, Team B","line1\nline2",x\n') == [
            ["Team A, Team B", "line1\nline2", "x"]
        ]

    def test_doubled_quote_escape(self) -> None:
        assert _rows('"He said ""over""",1\n') == [['He said "over"', "1"]]

    def test_space_around_quoted_field(self) -> None:
        assert _rows(' "a" , "b" \n') == [["a", "b"]]

    def test_bom_dropped(self) -> None:
        assert _rows("\ufeffData,Odd\n") == [["Data", "Odd"]]

    def test_blank_lines_skipped(self) -> None:
        assert _rows("a,b\n\n   \r\n1,2\n") == [["a", "b"], ["1", "2"]]

    def test_empty_fields_preserved(self) -> None:
        assert _rows("a,,c,\n") == [["a", "", "c", ""]]

    def test_quoted_empty_line_is_a_record(self) -> None:
        assert _rows('""\n') == [[""]]

    def test_unterminated_quote_keeps_content(self) -> None:
        assert _rows('a,"open') == [["a", "open"]]
