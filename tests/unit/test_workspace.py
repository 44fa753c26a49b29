"""
临时工作区单元测试
"""

import itertools

import pytest

from zfdeploy.build.build_context import TempDirExhaustedError
from zfdeploy.build.workspace import MAX_ATTEMPTS, WORKSPACE_PREFIX, WorkspaceManager


class TestWorkspaceCreate:
    """工作区创建测试"""

    def test_create_unique_directory(self, tmp_path):
        manager = WorkspaceManager(temp_root=tmp_path)
        first = manager.create()
        second = manager.create()

        assert first.is_dir()
        assert second.is_dir()
        assert first != second
        assert first.name.startswith(WORKSPACE_PREFIX)
        assert first.parent == tmp_path

    def test_retry_on_collision(self, tmp_path):
        """前两次生成的名字已存在，第三次成功"""
        (tmp_path / "taken-1").mkdir()
        (tmp_path / "taken-2").mkdir()
        names = iter(["taken-1", "taken-2", "fresh"])

        manager = WorkspaceManager(temp_root=tmp_path, name_factory=lambda: next(names))
        assert manager.create() == tmp_path / "fresh"

    def test_exhausted_after_max_attempts(self, tmp_path):
        (tmp_path / "taken").mkdir()
        calls = itertools.count()

        def name_factory():
            next(calls)
            return "taken"

        manager = WorkspaceManager(temp_root=tmp_path, name_factory=name_factory)
        with pytest.raises(TempDirExhaustedError):
            manager.create()
        assert next(calls) == MAX_ATTEMPTS


class TestWorkspaceDestroy:
    """工作区删除测试"""

    def test_destroy_nested_tree(self, tmp_path):
        manager = WorkspaceManager(temp_root=tmp_path)
        workspace = manager.create()
        (workspace / "a" / "b").mkdir(parents=True)
        (workspace / "a" / "b" / "file.txt").write_text("x")
        (workspace / "top.txt").write_text("x")

        assert manager.destroy(workspace) is True
        assert not workspace.exists()

    def test_destroy_missing_directory_does_not_raise(self, tmp_path):
        manager = WorkspaceManager(temp_root=tmp_path)
        assert manager.destroy(tmp_path / "missing") is True
