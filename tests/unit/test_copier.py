"""
目录树复制单元测试
"""

import os
import stat
import sys

import pytest

from zfdeploy.build.copier import TreeCopier, copy_tree


def relative_files(root):
    result = set()
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            result.add(os.path.relpath(os.path.join(dirpath, name), root).replace(os.sep, "/"))
    return result


class TestTreeCopier:
    """TreeCopier 测试"""

    def test_copies_everything_except_git_and_gitignored(self, sample_app, tmp_path):
        dest = tmp_path / "dest"
        count = copy_tree(sample_app, dest)

        files = relative_files(dest)
        assert ".git/HEAD" not in files
        assert "config/autoload/local.php" not in files
        assert "config/autoload/global.php" in files
        assert "vendor/zf/zfcbase/Module.php" in files
        assert ".gitignore" in files
        assert count == len(files)

    def test_gitignore_off_copies_ignored_file(self, sample_app, tmp_path):
        dest = tmp_path / "dest"
        copy_tree(sample_app, dest, use_gitignore=False)

        assert (dest / "config" / "autoload" / "local.php").is_file()
        assert not (dest / ".git").exists()

    def test_caller_exclusions(self, sample_app, tmp_path):
        dest = tmp_path / "dest"
        copier = TreeCopier()
        copier.copy(sample_app, dest, [sample_app / "vendor", sample_app / "composer.lock"])

        assert not (dest / "vendor").exists()
        assert not (dest / "composer.lock").exists()
        assert (dest / "composer.json").is_file()
        assert str(sample_app / "vendor") in copier.skipped

    def test_nested_gitignore_applies_to_its_directory(self, tmp_path):
        """子目录的 .gitignore 只作用于自己，并继承父目录的排除"""
        source = tmp_path / "src"
        (source / "data" / "cache").mkdir(parents=True)
        (source / "data" / ".gitignore").write_text("*.tmp\n")
        (source / "data" / "a.tmp").write_text("x")
        (source / "data" / "keep.txt").write_text("x")
        (source / "b.tmp").write_text("x")
        (source / "data" / "cache" / "c.bin").write_text("x")
        (source / ".gitignore").write_text("data/cache\n")

        dest = tmp_path / "dest"
        copy_tree(source, dest)

        files = relative_files(dest)
        assert "b.tmp" in files
        assert "data/keep.txt" in files
        assert "data/a.tmp" not in files
        assert "data/cache/c.bin" not in files

    def test_file_contents_and_mode_preserved(self, tmp_path):
        source = tmp_path / "src"
        source.mkdir()
        script = source / "run.sh"
        script.write_bytes(b"#!/bin/sh\necho hi\n")
        script.chmod(0o755)

        dest = tmp_path / "dest"
        copy_tree(source, dest)

        copied = dest / "run.sh"
        assert copied.read_bytes() == b"#!/bin/sh\necho hi\n"
        if sys.platform != "win32":
            assert stat.S_IMODE(copied.stat().st_mode) == 0o755

    def test_missing_source_is_noop(self, tmp_path):
        dest = tmp_path / "dest"
        assert copy_tree(tmp_path / "missing", dest) == 0
        assert not dest.exists()

    def test_empty_directories_are_created(self, tmp_path):
        source = tmp_path / "src"
        (source / "empty").mkdir(parents=True)

        dest = tmp_path / "dest"
        copy_tree(source, dest)

        assert (dest / "empty").is_dir()

    @pytest.mark.skipif(sys.platform == "win32", reason="需要 POSIX 权限")
    def test_unreadable_subdirectory_is_skipped(self, tmp_path):
        if os.geteuid() == 0:
            pytest.skip("root 用户可以读取任何目录")
        source = tmp_path / "src"
        locked = source / "locked"
        locked.mkdir(parents=True)
        (locked / "secret.txt").write_text("x")
        (source / "ok.txt").write_text("x")
        locked.chmod(0)
        try:
            dest = tmp_path / "dest"
            copy_tree(source, dest)
            assert (dest / "ok.txt").is_file()
            assert not (dest / "locked" / "secret.txt").exists()
        finally:
            locked.chmod(0o755)

    @pytest.mark.skipif(sys.platform == "win32", reason="需要 POSIX 符号链接")
    def test_symlink_loop_is_skipped(self, tmp_path):
        """指回上级目录的符号链接不会被无限展开"""
        source = tmp_path / "src"
        (source / "a").mkdir(parents=True)
        (source / "a" / "file.txt").write_text("x")
        os.symlink(source / "a", source / "a" / "loop")
        os.symlink(source, source / "root")

        dest = tmp_path / "dest"
        copy_tree(source, dest)

        assert (dest / "a" / "file.txt").read_text() == "x"
        assert not (dest / "a" / "loop").exists()
        assert not (dest / "root").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="需要 POSIX 符号链接")
    def test_symlink_to_sibling_directory_is_copied(self, tmp_path):
        source = tmp_path / "src"
        (source / "shared").mkdir(parents=True)
        (source / "shared" / "file.txt").write_text("x")
        os.symlink(source / "shared", source / "alias")

        dest = tmp_path / "dest"
        copy_tree(source, dest)

        assert (dest / "alias" / "file.txt").read_text() == "x"
        assert (dest / "shared" / "file.txt").read_text() == "x"
