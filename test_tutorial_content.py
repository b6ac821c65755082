import pytest
from lexer import TokenClass, tokenize
from pydantic import ValidationError
from tutorial_content import (
    TutorialSection, TutorialContentError, load_sections, parse_sections, DEFAULT_CONTENT_PATH,
)

RECORD = {"title": "Literals", "content": "Numbers.", "startingCode": "5", "expect": "5"}


def write(tmp_path, text):
    path = tmp_path / "tut.yml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_mapping_keeps_document_order(tmp_path):
    path = write(tmp_path, (
        'zeta:\n  title: "Z"\n  content: "z"\n  startingCode: "1"\n  expect: "1"\n'
        'alpha:\n  title: "A"\n  content: "a"\n  startingCode: "2"\n  expect: "2"\n'
    ))
    sections = load_sections(path)
    assert [s.title for s in sections] == ["Z", "A"]
    assert sections[1].starting_code == "2"
    assert sections[1].expected_output == "2"


def test_list_form():
    sections = parse_sections([RECORD, dict(RECORD, title="Tuples")])
    assert [s.title for s in sections] == ["Literals", "Tuples"]
    assert sections[0].narrative == "Numbers."


def test_multiline_code_is_kept_verbatim(tmp_path):
    path = write(tmp_path, (
        'blocks:\n  title: "Blocks"\n  content: "c"\n'
        '  startingCode: |\n    {\n        $0\n    }\n  expect: "x"\n'
    ))
    (section,) = load_sections(path)
    assert section.starting_code == "{\n    $0\n}\n"


def test_missing_field_is_fatal():
    record = dict(RECORD)
    del record["expect"]
    with pytest.raises(TutorialContentError) as excinfo:
        parse_sections({"broken": record})
    assert "broken" in str(excinfo.value)


def test_extra_field_is_fatal():
    with pytest.raises(TutorialContentError):
        parse_sections([dict(RECORD, hint="nope")])


def test_non_string_field_is_fatal():
    # an unquoted `expect: 5` arrives as an int
    with pytest.raises(TutorialContentError) as excinfo:
        parse_sections([dict(RECORD, expect=5)])
    assert "#1" in str(excinfo.value)


def test_non_mapping_record_is_fatal():
    with pytest.raises(TutorialContentError):
        parse_sections(["just a string"])


def test_empty_content_is_fatal(tmp_path):
    with pytest.raises(TutorialContentError):
        load_sections(write(tmp_path, ""))
    with pytest.raises(TutorialContentError):
        parse_sections({})


def test_bad_yaml_is_fatal(tmp_path):
    with pytest.raises(TutorialContentError):
        load_sections(write(tmp_path, "a: [unclosed\n"))


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(TutorialContentError):
        load_sections(str(tmp_path / "missing.yml"))


def test_sections_are_immutable():
    (section,) = parse_sections([RECORD])
    with pytest.raises(ValidationError):
        section.title = "changed"


def test_bundled_tour_loads():
    sections = load_sections(DEFAULT_CONTENT_PATH)
    assert sections[0].title == "Literals"
    assert all(isinstance(s, TutorialSection) for s in sections)
    assert len(sections) >= 5


def root_is_block(source):
    """True when the whole program is one { ... } block, i.e. a closure the runner can execute."""
    significant = [t for t in tokenize(source) if t.type is not TokenClass.UNCLASSIFIED]
    if not significant or significant[0].type is not TokenClass.LEFT_BRACE:
        return False
    depth = 0
    for i, tok in enumerate(significant):
        if tok.type is TokenClass.LEFT_BRACE:
            depth += 1
        elif tok.type is TokenClass.RIGHT_BRACE:
            depth -= 1
            if depth == 0:
                return i == len(significant) - 1
    return False


def test_root_block_detection():
    assert root_is_block("{ 5 }")
    assert root_is_block("{\n    (1 2) |* { ($0 $1) }\n}\n")
    assert not root_is_block("5")
    assert not root_is_block("(1 2 3)")
    assert not root_is_block("() | { 5 }")
    assert not root_is_block("{ 1 } | { $0 }")


@pytest.mark.parametrize("section", load_sections(DEFAULT_CONTENT_PATH), ids=lambda s: s.title)
def test_bundled_programs_run_as_closures(section):
    # sections run with the root closure executed; any other root value is an error
    assert root_is_block(section.starting_code)


@pytest.mark.parametrize("section", load_sections(DEFAULT_CONTENT_PATH), ids=lambda s: s.title)
def test_bundled_expectations_use_display_form(section):
    # strings display without quotes, so an expected output never contains one
    assert '"' not in section.expected_output
