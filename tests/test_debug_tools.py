import pytest

from eventd_debug_tools import debug, err, get_level, info, info_str, log, set_level, warn


def test_info_and_log_go_to_stdout(capsys):
    info("eventd -> reconnected")
    log("published", {"topic": "orders"})
    captured = capsys.readouterr()
    assert "eventd -> reconnected" in captured.out
    assert '"topic": "orders"' in captured.out
    assert captured.err == ""


def test_warn_and_err_go_to_stderr(capsys):
    warn("retrying")
    err("invalid configuration")
    captured = capsys.readouterr()
    assert "retrying" in captured.err
    assert "invalid configuration" in captured.err


def test_debug_hidden_by_default(capsys):
    debug("connecting")
    assert capsys.readouterr().out == ""


def test_debug_shown_at_debug_level(capsys):
    set_level("debug")
    assert get_level() == "DEBUG"
    debug("connecting")
    assert "connecting" in capsys.readouterr().out


def test_error_level_hides_warnings(capsys):
    set_level("ERROR")
    warn("retrying")
    info_str(["a", "b"])
    err("fatal")
    captured = capsys.readouterr()
    assert "retrying" not in captured.err
    assert "fatal" in captured.err
    assert captured.out == ""


def test_unknown_level():
    with pytest.raises(ValueError):
        set_level("TRACE")
