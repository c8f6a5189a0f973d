import pytest

import main
from messages import Message


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.setenv("WSCODE_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("WSCODE_LOG_LEVEL", "WARNING")
    monkeypatch.chdir(tmp_path)


def test_parser_defaults():
    args = main.build_parser().parse_args([])
    assert args.root is None
    assert args.max_rounds is None
    assert not args.verbose


def test_missing_key_fails_start_up(project, monkeypatch, capsys):
    monkeypatch.delenv("OPENROUTER_KEY", raising=False)
    assert main.main(["--root", str(project), "--query", "hi"]) == 2
    assert "OPENROUTER_KEY" in capsys.readouterr().err


def test_single_query(project, monkeypatch, capsys):
    monkeypatch.setenv("OPENROUTER_KEY", "sk-test")
    monkeypatch.setattr(
        "adapters.openai_compat.OpenAICompatGateway.complete",
        lambda self, history, tools: Message.assistant(f"{len(tools)} tools available"),
    )
    assert main.main(["--root", str(project), "--query", "hi", "--max-rounds", "3"]) == 0
    assert "6 tools available" in capsys.readouterr().out


def test_repl_commands(project, monkeypatch, capsys):
    monkeypatch.setenv("OPENROUTER_KEY", "sk-test")
    monkeypatch.setattr(
        "adapters.openai_compat.OpenAICompatGateway.complete",
        lambda self, history, tools: Message.assistant("pong"),
    )
    inputs = iter(["/tools", "ping", "/history", "/clear", "/exit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))
    assert main.main(["--root", str(project)]) == 0
    out = capsys.readouterr().out
    assert "list_directory, read_file" in out
    assert "assistant> pong" in out
    assert "[user] ping" in out
    assert "(history cleared)" in out
    assert "bye!" in out
