import logging

import pytest
import main
from tutorial_content import DEFAULT_CONTENT_PATH
from interpreter_bridge import DEFAULT_EXECUTABLE


def test_defaults():
    options = main.parse_args([])
    assert options == {
        "content": DEFAULT_CONTENT_PATH,
        "interpreter": DEFAULT_EXECUTABLE,
        "legacy_lexer": False,
        "verbose": False,
    }


def test_all_options():
    options = main.parse_args(["tour.yml", "--interpreter", "/opt/bp", "--legacy-lexer", "--verbose"])
    assert options["content"] == "tour.yml"
    assert options["interpreter"] == "/opt/bp"
    assert options["legacy_lexer"] is True
    assert options["verbose"] is True


def test_unknown_option():
    with pytest.raises(ValueError):
        main.parse_args(["--fast"])


def test_bad_content_exits_before_opening_a_window(tmp_path, monkeypatch, caplog):
    bad = tmp_path / "bad.yml"
    bad.write_text("- title: only a title\n", encoding="utf-8")
    monkeypatch.setattr(main, "ensure_registered", lambda rules: None)
    options = dict(main.parse_args([str(bad)]))
    with caplog.at_level(logging.ERROR):
        assert main.run(options) == 1
    assert "Cannot start the tour" in caplog.text
