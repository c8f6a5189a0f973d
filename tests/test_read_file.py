import pytest

from errors import ConfinementError, NotFoundError, ToolValidationError
from tools.read_file import ReadFileTool


@pytest.fixture
def five_lines(project):
    path = project / "five.txt"
    path.write_text("one\ntwo\nthree\nfour\nfive", encoding="utf-8")
    return path


class TestReadFile:
    def test_full_read(self, project, five_lines):
        out = ReadFileTool(str(project)).execute({"absolute_path": str(five_lines)}).llm_content
        assert out.startswith(f"Successfully read file: {five_lines}")
        assert "Total lines: 5" in out
        assert "Lines read: 5" in out
        assert out.endswith("\n\nContent:\none\ntwo\nthree\nfour\nfive")
        assert "Starting from line" not in out

    def test_offset_and_limit(self, project, five_lines):
        out = ReadFileTool(str(project)).execute(
            {"absolute_path": str(five_lines), "offset": 1, "limit": 2}
        ).llm_content
        assert "Lines read: 2" in out
        assert "Starting from line: 1" in out
        assert "Line limit: 2" in out
        assert out.endswith("Content:\ntwo\nthree")

    def test_offset_past_end_reads_nothing(self, project, five_lines):
        out = ReadFileTool(str(project)).execute({"absolute_path": str(five_lines), "offset": 50}).llm_content
        assert "Lines read: 0" in out
        assert out.endswith("Content:\n")

    def test_limit_zero_means_no_cap(self, project, five_lines):
        out = ReadFileTool(str(project)).execute({"absolute_path": str(five_lines), "limit": 0}).llm_content
        assert "Lines read: 5" in out

    def test_negative_offset_rejected(self, project, five_lines):
        msg = ReadFileTool(str(project)).validate_tool_params({"absolute_path": str(five_lines), "offset": -1})
        assert "offset must be >= 0" in msg

    def test_unknown_property_rejected(self, project, five_lines):
        msg = ReadFileTool(str(project)).validate_tool_params({"absolute_path": str(five_lines), "encoding": "utf8"})
        assert "encoding" in msg

    def test_relative_path_rejected(self, project):
        with pytest.raises(ToolValidationError):
            ReadFileTool(str(project)).execute({"absolute_path": "README.md"})

    def test_dotdot_escape_rejected(self, project):
        with pytest.raises(ConfinementError):
            ReadFileTool(str(project)).execute({"absolute_path": str(project / ".." / "secret.txt")})

    def test_missing_file(self, project):
        with pytest.raises(NotFoundError, match="does not exist"):
            ReadFileTool(str(project)).execute({"absolute_path": str(project / "absent.txt")})

    def test_crlf_preserved(self, project):
        path = project / "win.txt"
        path.write_bytes(b"a\r\nb\r\n")
        out = ReadFileTool(str(project)).execute({"absolute_path": str(path)}).llm_content
        assert out.endswith("Content:\na\r\nb\r\n")


def test_symlink_leaving_root_is_rejected(project, tmp_path):
    (tmp_path / "secret.txt").write_text("s", encoding="utf-8")
    (project / "peek.txt").symlink_to(tmp_path / "secret.txt")
    with pytest.raises(ConfinementError):
        ReadFileTool(str(project)).execute({"absolute_path": str(project / "peek.txt")})
