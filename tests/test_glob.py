import pytest

from errors import ConfinementError, NotFoundError
from tools.glob_tool import GlobTool


class TestGlob:
    def test_recursive_pattern(self, project):
        out = GlobTool(str(project)).execute({"pattern": "**/*.ts"}).llm_content
        lines = out.splitlines()
        assert lines[0] == f'Found 2 matches for pattern "**/*.ts" in {project}:'
        assert lines[1] == "(2 files, 0 directories)"
        assert lines[3].startswith("[FILE] src/lib/util.ts (")
        assert lines[4].startswith("[FILE] src/main.ts (")

    def test_ignored_dirs_not_searched(self, project):
        out = GlobTool(str(project)).execute({"pattern": "**/*.js"}).llm_content
        assert "src/app.js" in out
        assert "node_modules" not in out

    def test_non_recursive_pattern_stays_in_base(self, project):
        out = GlobTool(str(project)).execute({"pattern": "*.md"}).llm_content
        assert "[FILE] README.md" in out
        assert "guide.md" not in out

    def test_directories_are_marked(self, project):
        out = GlobTool(str(project)).execute({"pattern": "src"}).llm_content
        assert "(0 files, 1 directories)" in out
        assert "[DIR] src" in out

    def test_brace_alternation_and_subpath(self, project):
        out = GlobTool(str(project)).execute({"pattern": "*.{ts,js}", "path": str(project / "src")}).llm_content
        assert "[FILE] app.js" in out and "[FILE] main.ts" in out
        assert "util.ts" not in out

    def test_no_matches(self, project):
        out = GlobTool(str(project)).execute({"pattern": "*.rs"}).llm_content
        assert out == f'No files found matching pattern "*.rs" in {project}'

    def test_empty_pattern_rejected(self, project):
        assert GlobTool(str(project)).validate_tool_params({"pattern": "  "}) == "Pattern cannot be empty"

    def test_path_outside_root(self, project, tmp_path):
        with pytest.raises(ConfinementError):
            GlobTool(str(project)).execute({"pattern": "*", "path": str(tmp_path)})

    def test_missing_base(self, project):
        with pytest.raises(NotFoundError):
            GlobTool(str(project)).execute({"pattern": "*", "path": "missing"})


class TestGlobWalkEdges:
    def test_unreadable_subdirectory_is_skipped(self, project, unreadable):
        unreadable(project / "src" / "lib")
        out = GlobTool(str(project)).execute({"pattern": "**/*.ts"}).llm_content
        assert "[FILE] src/main.ts" in out
        assert "util.ts" not in out

    def test_links_leaving_root_are_dropped(self, escaping_links):
        out = GlobTool(str(escaping_links)).execute({"pattern": "**/*"}).llm_content
        assert "escape.ts" not in out
        assert "external" not in out
        assert "leak.ts" not in out
        assert "[FILE] src/main.ts" in out
