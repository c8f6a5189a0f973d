import pytest

from errors import DuplicateToolError
from tools.ls import LsTool
from tools.registry import ToolRegistry, build_base_registry


class TestToolRegistry:
    def test_builtin_set(self, registry):
        assert registry.list_names() == ["list_directory", "read_file", "read_files", "glob", "grep", "edit_file"]
        assert len(registry) == 6

    def test_duplicate_registration(self, project):
        reg = ToolRegistry(str(project))
        reg.register(LsTool(str(project)))
        with pytest.raises(DuplicateToolError, match="Tool with name list_directory is already registered."):
            reg.register(LsTool(str(project)))

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("rm_rf") is None
        assert registry.get(None) is None
        assert registry.get("") is None

    def test_all_schemas_follow_registration_order(self, registry):
        descriptors = registry.all_schemas()
        assert [d.name for d in descriptors] == registry.list_names()
        assert all(d.schema["type"] == "object" for d in descriptors)

    def test_missing_root(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            build_base_registry(str(tmp_path / "nope"))

    def test_tools_share_root(self, registry, project):
        assert {registry.get(n).root for n in registry.list_names()} == {str(project)}

    def test_wrapped_execute_still_returns_result(self, registry, project):
        result = registry.get("list_directory").execute({"path": str(project)})
        assert result.llm_content.startswith("Directory listing for")
