from mdmerge.splitter import is_delimiter_line, split_document


def test_no_delimiter():
    """Without a rule the whole text is the before region."""
    text = "| A |\n| --- |\n| 1 |\n"
    sections = split_document(text)
    assert sections.before == text
    assert sections.after is None
    assert not sections.has_trailing_content


def test_split_on_first_rule():
    text = "| A |\n| --- |\n| 1 |\n\n---\n\nNotes here.\n"
    sections = split_document(text, source="doc.md")
    assert sections.before == "| A |\n| --- |\n| 1 |\n\n"
    assert sections.after == "\nNotes here.\n"
    assert sections.source == "doc.md"
    assert sections.has_trailing_content


def test_only_first_rule_splits():
    """Later rules stay verbatim in the after region."""
    text = "intro\n\n---\n\npart one\n\n---\n\npart two\n"
    sections = split_document(text)
    assert sections.before == "intro\n\n"
    assert sections.after == "\npart one\n\n---\n\npart two\n"


def test_rule_directly_under_table_splits():
    text = "| A |\n| --- |\n| 1 |\n---\n\nafter\n"
    sections = split_document(text)
    assert sections.before == "| A |\n| --- |\n| 1 |\n"
    assert sections.after == "\nafter\n"


def test_heading_underline_is_not_a_delimiter():
    """'---' right under a paragraph line is a setext heading."""
    text = "Heading\n---\n\nbody\n"
    assert split_document(text).after is None


def test_heading_underline_under_prose_with_pipe():
    """A paragraph containing a pipe is still a paragraph, not a table row."""
    assert split_document("Result: pass | fail\n---\n\nbody\n").after is None
    assert split_document("| just | a header |\n---\n\nbody\n").after is None


def test_rule_under_table_after_prose_with_pipe():
    text = "a | b\n\n| A | B |\n| - | - |\n| 1 | 2 |\n---\n\ntail\n"
    sections = split_document(text)
    assert sections.before == "a | b\n\n| A | B |\n| - | - |\n| 1 | 2 |\n"
    assert sections.after == "\ntail\n"


def test_rule_under_header_only_table():
    sections = split_document("| A |\n| --- |\n---\n\ntail\n")
    assert sections.before == "| A |\n| --- |\n"
    assert sections.after == "\ntail\n"


def test_rule_needs_blank_line_below():
    assert split_document("intro\n\n---\nbody\n").after is None


def test_rule_at_end_of_text():
    sections = split_document("table\n\n---")
    assert sections.before == "table\n\n"
    assert sections.after == ""
    assert not sections.has_trailing_content


def test_longer_rules_and_trailing_spaces():
    sections = split_document("a\n\n------   \n\nb\n")
    assert sections.after == "\nb\n"


def test_rule_inside_code_fence_is_ignored():
    text = "```\n\n---\n\n```\n\nreal\n\n---\n\ntail\n"
    sections = split_document(text)
    assert sections.before == "```\n\n---\n\n```\n\nreal\n\n"
    assert sections.after == "\ntail\n"


def test_is_delimiter_line():
    assert is_delimiter_line("---")
    assert is_delimiter_line("   -----\n")
    assert not is_delimiter_line("--")
    assert not is_delimiter_line("    ---")
    assert not is_delimiter_line("- - -")
    assert not is_delimiter_line("| --- |")
