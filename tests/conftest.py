"""Shared fixtures: a small project tree, a tool registry on it, and a scripted gateway."""

import json
import os
from typing import List, Optional

import pytest

from adapters.base import LLMGateway
from messages import Message, ToolCall
from tools.registry import build_base_registry


class ScriptedGateway(LLMGateway):
    """Replays queued replies and records every history it was called with."""

    def __init__(self, replies: List[Optional[Message]]):
        self.replies = list(replies)
        self.calls: List[List[Message]] = []
        self.schema_names: List[List[str]] = []

    def complete(self, history, tool_schemas):
        self.calls.append(history)
        self.schema_names.append([d.name for d in tool_schemas])
        if not self.replies:
            raise AssertionError("ScriptedGateway ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def call(name, args, call_id="call_1"):
    raw = args if isinstance(args, str) else json.dumps(args)
    return ToolCall(id=call_id, name=name, raw_arguments=raw)


def tool_reply(*calls):
    return Message.assistant(None, list(calls))


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "proj"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "README.md").write_text("# Demo\nHello world\n", encoding="utf-8")
    (root / "src" / "main.ts").write_text("import { util } from './lib/util';\nconsole.log(util());\n", encoding="utf-8")
    (root / "src" / "lib" / "util.ts").write_text("export function util() {\n  return 'TODO: hello';\n}\n", encoding="utf-8")
    (root / "src" / "app.js").write_text("// todo: wire up\nmodule.exports = {};\n", encoding="utf-8")
    (root / "docs" / "guide.md").write_text("Guide\nTODO later\n", encoding="utf-8")
    (root / "node_modules" / "dep" / "index.js").write_text("// TODO inside dependency\n", encoding="utf-8")
    (root / ".git" / "config").write_text("[core] TODO\n", encoding="utf-8")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nTODO")
    return root


@pytest.fixture
def registry(project):
    return build_base_registry(str(project))


@pytest.fixture
def unreadable(monkeypatch):
    """Make scandir fail on the given directories, as with a chmod 000 dir (root ignores real modes)."""
    blocked = set()
    real_scandir = os.scandir

    def scandir(path="."):
        if os.fspath(path) in blocked:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    return lambda p: blocked.add(str(p))


@pytest.fixture
def escaping_links(project, tmp_path):
    """A file link and a directory link inside the root, both pointing outside it."""
    outside_dir = tmp_path / "elsewhere"
    outside_dir.mkdir()
    (outside_dir / "leak.ts").write_text("// TODO leaked secret\n", encoding="utf-8")
    (tmp_path / "secret.ts").write_text("// TODO secret\n", encoding="utf-8")
    (project / "src" / "escape.ts").symlink_to(tmp_path / "secret.ts")
    (project / "src" / "external").symlink_to(outside_dir, target_is_directory=True)
    return project
