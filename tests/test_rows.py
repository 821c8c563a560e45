from __future__ import annotations

import unittest

from photogram.rows import parse_line, parse_rows


class TestParseLine(unittest.TestCase):
    def test_quoted_comma_and_escaped_quote(self) -> None:
        self.assertEqual(
            parse_line('"a, b","He said ""hi"""'),
            ["a, b", 'He said "hi"'],
        )

    def test_plain_fields_are_trimmed(self) -> None:
        self.assertEqual(parse_line(" x ,y,  z"), ["x", "y", "z"])

    def test_empty_fields_are_kept(self) -> None:
        self.assertEqual(parse_line("a,,c,"), ["a", "", "c", ""])

    def test_empty_quoted_field(self) -> None:
        self.assertEqual(parse_line('"",x'), ["", "x"])


class TestParseRows(unittest.TestCase):
    def test_header_and_rows(self) -> None:
        text = 'id,caption\n1,"Hello, world"\n2,plain\n'

        rows = parse_rows(text)

        self.assertEqual(rows, [["id", "caption"], ["1", "Hello, world"], ["2", "plain"]])

    def test_crlf_line_endings(self) -> None:
        self.assertEqual(parse_rows("a,b\r\n1,2\r\n"), [["a", "b"], ["1", "2"]])

    def test_quoted_newline_is_not_supported(self) -> None:
        rows = parse_rows('id,caption\n1,"two\nlines"\n')

        # Each physical line becomes its own row.
        self.assertEqual(len(rows), 3)

    def test_empty_text(self) -> None:
        self.assertEqual(parse_rows(""), [])


if __name__ == "__main__":
    unittest.main()
