import io

import pytest
from rich.console import Console

from kbchat.console import RichChatConsole
from kbchat.domain.exceptions import InputError
from kbchat.flows.state import RunState
from kbchat.knowledge.catalog import KnowledgeSource


def _console():
    buf = io.StringIO()
    return Console(file=buf, force_terminal=False, color_system=None, width=120), buf


def test_type_out_writes_every_character():
    console, buf = _console()
    delays = []
    rc = RichChatConsole(console=console, typing_delay=0.01, sleep=delays.append)
    assert rc.type_out("hello", RunState()) is True
    assert buf.getvalue() == "hello\n"
    assert delays == [0.01] * 5


def test_type_out_stops_when_run_is_cancelled():
    console, buf = _console()
    run = RunState()

    def sleep(_):
        if buf.getvalue().endswith("l"):
            run.stop("interrupt")

    rc = RichChatConsole(console=console, typing_delay=0.01, sleep=sleep)
    assert rc.type_out("hello world", run) is False
    assert buf.getvalue() == "hel\n"


def test_type_out_without_delay_never_sleeps():
    console, buf = _console()
    rc = RichChatConsole(console=console, typing_delay=0.0, sleep=lambda _: pytest.fail("slept"))
    rc.type_out("[bold]x[/bold]", RunState())
    assert buf.getvalue() == "[bold]x[/bold]\n"


def test_read_line_maps_eof(monkeypatch):
    console, _ = _console()

    def fake_input(*_):
        raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    with pytest.raises(InputError) as ei:
        RichChatConsole(console=console).read_line("> ")
    assert ei.value.code == "INPUT_EOF"


def test_read_line_returns_input(monkeypatch):
    console, buf = _console()
    monkeypatch.setattr("builtins.input", lambda *_: "typed text")
    assert RichChatConsole(console=console).read_line("Prompt: ") == "typed text"
    assert "Prompt: " in buf.getvalue()


def test_show_sources_marks_active():
    console, buf = _console()
    rc = RichChatConsole(console=console)
    rc.show_sources(
        [KnowledgeSource(name="None"), KnowledgeSource(name="PII", kind="pii", path="data/pii.json")],
        "PII",
    )
    out = buf.getvalue()
    assert "[0] None" in out
    assert "[1] PII (data/pii.json) *" in out


def test_busy_context_exits_cleanly():
    console, _ = _console()
    with RichChatConsole(console=console).busy("working"):
        pass
