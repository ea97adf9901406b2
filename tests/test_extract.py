import pytest

from mdmerge.extract import TableExtractor, extract_tables, flatten_inline, split_row
from mdmerge.schema import Table


@pytest.fixture
def extractor():
    return TableExtractor()


def test_simple_table(extractor):
    """Header, delimiter and data rows produce one table."""
    text = "| ID | Name |\n| --- | --- |\n| 1 | Alice |\n| 2 | Bob |\n"
    tables = list(extractor.extract_tables(text))
    assert tables == [Table(headers=["ID", "Name"], rows=[["1", "Alice"], ["2", "Bob"]])]


def test_table_embedded_in_prose(extractor):
    """Tables are found between paragraphs, in document order."""
    text = (
        "# Title\n\nSome intro text.\n\n"
        "| A | B |\n|:--|--:|\n| 1 | 2 |\n\n"
        "More text | with a pipe but no delimiter row.\n\n"
        "| C |\n| :-: |\n| 3 |\n"
    )
    tables = extract_tables(text)
    assert [t.headers for t in tables] == [["A", "B"], ["C"]]
    assert tables[1].rows == [["3"]]


def test_header_only_table(extractor):
    """A header with no data lines is a table with no rows."""
    table = extractor.first_table("| ID | Score |\n| --- | --- |\n")
    assert table is not None
    assert table.headers == ["ID", "Score"]
    assert table.rows == []


def test_rows_without_outer_pipes(extractor):
    table = extractor.first_table("ID | Name\n--- | ---\n1 | Alice\n")
    assert table.headers == ["ID", "Name"]
    assert table.rows == [["1", "Alice"]]


def test_delimiter_width_must_match_header(extractor):
    """A delimiter row with a different cell count does not start a table."""
    assert extract_tables("| A | B |\n| --- |\n| 1 | 2 |\n") == []


def test_missing_delimiter_is_not_a_table():
    assert extract_tables("| A | B |\n| 1 | 2 |\n") == []


def test_empty_header_discards_table():
    """Headerless tables are dropped instead of yielding empty headers."""
    assert extract_tables("|  |  |\n| --- | --- |\n| 1 | 2 |\n") == []


def test_non_row_line_ends_table(extractor):
    text = "| A |\n| --- |\n| 1 |\nplain paragraph\n| 2 |\n"
    table = extractor.first_table(text)
    assert table.rows == [["1"]]


def test_blank_line_ends_table(extractor):
    text = "| A |\n| --- |\n| 1 |\n\n| 2 |\n"
    assert extractor.first_table(text).rows == [["1"]]


def test_ragged_rows_are_kept_as_written(extractor):
    """Rows keep their own cell count; nothing is padded or truncated."""
    text = "| A | B |\n| --- | --- |\n| 1 |\n| 1 | 2 | 3 |\n"
    assert extractor.first_table(text).rows == [["1"], ["1", "2", "3"]]


def test_zero_cell_rows_are_dropped(extractor):
    text = "| A | B |\n| --- | --- |\n| 1 | 2 |\n|\n| 3 | 4 |\n"
    assert extractor.first_table(text).rows == [["1", "2"], ["3", "4"]]


def test_escaped_pipe_is_not_a_separator(extractor):
    text = "| Expr | Meaning |\n| --- | --- |\n| a \\| b | either |\n"
    assert extractor.first_table(text).rows == [["a | b", "either"]]


def test_tables_inside_code_fences_are_ignored():
    text = (
        "```markdown\n| X | Y |\n| --- | --- |\n| 1 | 2 |\n```\n\n"
        "| A |\n| --- |\n| ok |\n"
    )
    tables = extract_tables(text)
    assert len(tables) == 1
    assert tables[0].headers == ["A"]


def test_indented_code_is_not_a_table():
    assert extract_tables("    | A |\n    | --- |\n    | 1 |\n") == []


def test_inline_formatting_is_flattened(extractor):
    text = (
        "| **ID** | Link | Code |\n| --- | --- | --- |\n"
        "| *1* | [docs](https://example.com \"Docs\") | `x * y` |\n"
    )
    table = extractor.first_table(text)
    assert table.headers == ["ID", "Link", "Code"]
    assert table.rows == [["1", "docs", "x * y"]]


def test_raw_cell_text_when_not_flattening():
    table = TableExtractor(plain_text=False).first_table("| **A** |\n| --- |\n| _b_ |\n")
    assert table.headers == ["**A**"]
    assert table.rows == [["_b_"]]


def test_extraction_is_lazy_and_tolerates_empty_input(extractor):
    assert list(extractor.extract_tables("")) == []
    assert list(extractor.extract_tables(None)) == []
    assert extractor.first_table("no tables at all") is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("**bold** and *em*", "bold and em"),
        ("__strong__ _em_", "strong em"),
        ("~~gone~~", "gone"),
        ("***both***", "both"),
        ("snake_case_name", "snake_case_name"),
        ("![alt text](img.png)", "alt text"),
        ("[ref link][1]", "ref link"),
        ("<https://example.com>", "https://example.com"),
        ("`**not bold**`", "**not bold**"),
        ("`` a ` b ``", "a ` b"),
        ("\\*literal\\*", "*literal*"),
        ("  padded  ", "padded"),
        ("a  b", "a  b"),
    ],
)
def test_flatten_inline(raw, expected):
    assert flatten_inline(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("branch \ue0a0 main", "branch \ue0a0 main"),
        ("\ue100 `code` \uf8ff", "\ue100 code \uf8ff"),
        ("*\ue02a*", "\ue02a"),
        ("\\_\ue05f", "_\ue05f"),
    ],
)
def test_private_use_characters_survive_flattening(raw, expected):
    """Icon-font glyphs and other private-use code points are ordinary text."""
    assert flatten_inline(raw) == expected


def test_private_use_characters_in_cells(extractor):
    table = extractor.first_table("| Branch |\n| --- |\n| \ue0a0 main |\n")
    assert table.rows == [["\ue0a0 main"]]


def test_split_row():
    assert split_row("| a | b |") == [" a ", " b "]
    assert split_row("a | b") == ["a ", " b"]
    assert split_row("|") == []
    assert split_row("no pipes") is None
    assert split_row("   ") is None
    assert split_row("| a \\| b |") == [" a | b "]
