import json
import signal

from kbchat import cli
from kbchat.config.settings import Settings


class FakeProvider:
    name = "fake"

    def chat(self, req):
        raise AssertionError("no remote call expected")


def _settings(tmp_path, **overrides):
    pii = tmp_path / "pii.json"
    pii.write_text(json.dumps({"pii_description": ["A"], "exclude_pii_description": ["B"]}), encoding="utf-8")
    values = dict(
        _env_file=None,
        open_ai_service_url="https://example.openai.azure.com",
        open_ai_service_key="secret",
        knowledge_sources=[{"name": "None"}, {"name": "PII", "kind": "pii", "path": str(pii)}],
    )
    values.update(overrides)
    return Settings(**values)


def test_main_fails_fast_without_service_config(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "settings", _settings(tmp_path, open_ai_service_url=None))
    called = []
    monkeypatch.setattr(cli, "run_chat", lambda *a, **kw: called.append(a) or 0)
    assert cli.main([]) == 1
    assert called == []


def test_main_runs_chat_and_restores_signal_handler(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "settings", _settings(tmp_path))
    monkeypatch.setattr(cli, "create_provider", lambda name=None: FakeProvider())
    captured = {}

    def fake_run_chat(ctx, state):
        captured["ctx"] = ctx
        captured["state"] = state
        captured["handler"] = signal.getsignal(signal.SIGINT)
        return 0

    monkeypatch.setattr(cli, "run_chat", fake_run_chat)
    before = signal.getsignal(signal.SIGINT)
    assert cli.main(["--no-typing"]) == 0
    assert signal.getsignal(signal.SIGINT) is before

    ctx = captured["ctx"]
    assert ctx.system_prompt == "You are world class technical documentation writer."
    assert ctx.model_name == "chat"
    assert [s.name for s in ctx.catalog.sources] == ["None", "PII"]
    assert captured["state"]["knowledge"].text == ""

    # Ctrl-C 只会把共享的 RunState 标记为停止
    run = captured["state"]["run"]
    captured["handler"](signal.SIGINT, None)
    assert not run.running
    assert run.reason == "interrupt"


def test_main_preselects_knowledge(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "settings", _settings(tmp_path))
    monkeypatch.setattr(cli, "create_provider", lambda name=None: FakeProvider())
    captured = {}
    monkeypatch.setattr(cli, "run_chat", lambda ctx, state: captured.update(state=state) or 0)
    assert cli.main(["--knowledge", "pii"]) == 0
    knowledge = captured["state"]["knowledge"]
    assert knowledge.name == "PII"
    assert knowledge.text.splitlines()[1] == "A"


def test_main_unknown_knowledge_starts_empty(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "settings", _settings(tmp_path))
    monkeypatch.setattr(cli, "create_provider", lambda name=None: FakeProvider())
    captured = {}
    monkeypatch.setattr(cli, "run_chat", lambda ctx, state: captured.update(state=state) or 0)
    assert cli.main(["--knowledge", "weather"]) == 0
    assert captured["state"]["knowledge"].text == ""


def test_main_resolves_relative_knowledge_paths_against_knowledge_dir(monkeypatch, tmp_path):
    kb_dir = tmp_path / "kb"
    kb_dir.mkdir()
    (kb_dir / "pii.json").write_text(
        json.dumps({"pii_description": ["A"], "exclude_pii_description": ["B"]}), encoding="utf-8"
    )
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    monkeypatch.setattr(
        cli,
        "settings",
        _settings(
            tmp_path,
            knowledge_dir=str(kb_dir),
            knowledge_sources=[{"name": "PII", "kind": "pii", "path": "pii.json"}],
        ),
    )
    monkeypatch.setattr(cli, "create_provider", lambda name=None: FakeProvider())
    captured = {}
    monkeypatch.setattr(cli, "run_chat", lambda ctx, state: captured.update(state=state) or 0)
    assert cli.main(["--knowledge", "PII"]) == 0
    assert captured["state"]["knowledge"].name == "PII"
    assert captured["state"]["knowledge"].text.splitlines()[1] == "A"
