"""Delimited-text tokenizer for entry imports.

Handles ``"``-quoted fields (commas, embedded newlines, ``""`` escapes),
``\\r\\n`` and ``\\n`` record ends and a leading byte-order mark. Unquoted
fields are trimmed; quoted fields keep their content verbatim. The stdlib
``csv`` reader cannot trim one kind without the other, hence the hand scan.
"""

from collections.abc import Iterator

BOM = "\ufeff"


def tokenize(text: str, delimiter: str = ",") -> Iterator[list[str]]:
    """Yield one list of fields per record. Blank lines are skipped."""
    if text.startswith(BOM):
        text = text[1:]

    row: list[str] = []
    buf: list[str] = []
    quoted = False  # current field opened with a quote
    in_quotes = False
    i = 0
    n = len(text)

    def end_field() -> None:
        nonlocal buf, quoted
        value = "".join(buf)
        row.append(value if quoted else value.strip())
        buf = []
        quoted = False

    while i < n:
        c = text[i]
        if in_quotes:
            if c == '"':
                if i + 1 < n and text[i + 1] == '"':
                    buf.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                buf.append(c)
            i += 1
            continue

        if c == '"' and not quoted and not "".join(buf).strip():
            buf = []
            quoted = in_quotes = True
        elif c == delimiter:
            end_field()
        elif c in "\r\n":
            if c == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            was_quoted = quoted
            end_field()
            if not (len(row) == 1 and not row[0] and not was_quoted):
                yield row
            row = []
        elif quoted and c in " \t":
            pass  # whitespace between a closing quote and the delimiter
        else:
            buf.append(c)
        i += 1

    # Unterminated quote at EOF keeps whatever was read
    if row or buf or quoted:
        was_quoted = quoted
        end_field()
        if not (len(row) == 1 and not row[0] and not was_quoted):
            yield row
