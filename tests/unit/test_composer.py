"""
Composer 依赖安装单元测试

subprocess、PATH 查找和网络下载全部 mock，不需要真实的 composer/php。
"""

import subprocess
from unittest.mock import MagicMock, patch

import httpx
import pytest

from zfdeploy.build.build_context import InstallFailedError
from zfdeploy.build.composer import (
    COMPOSER_PHAR,
    INSTALL_ARGS,
    DependencyInstaller,
    InstallResult,
    remove_vendor_tests,
)


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def which_only(*available):
    return lambda name: f"/usr/bin/{name}" if name in available else None


class TestInstallResult:
    def test_output_joins_streams(self):
        result = InstallResult(command=["composer"], exit_code=1, stdout="out\n", stderr="err\n")
        assert not result.success
        assert result.output == "out\nerr"


class TestDependencyInstaller:
    """DependencyInstaller 测试"""

    @patch("zfdeploy.build.composer.subprocess.run")
    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("composer"))
    def test_composer_on_path(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = completed(0, "Generating autoload files")

        result = DependencyInstaller().install(tmp_path)

        assert result.success
        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/bin/composer"] + INSTALL_ARGS
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["timeout"] is None

    @patch("zfdeploy.build.composer.subprocess.run")
    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("php"))
    def test_existing_phar_is_self_updated(self, mock_which, mock_run, tmp_path):
        phar = tmp_path / COMPOSER_PHAR
        phar.write_bytes(b"phar")
        mock_run.return_value = completed(0)

        DependencyInstaller().install(tmp_path)

        commands = [call.args[0] for call in mock_run.call_args_list]
        assert commands[0] == ["/usr/bin/php", str(phar), "self-update"]
        assert commands[1] == ["/usr/bin/php", str(phar)] + INSTALL_ARGS
        # 用户自带的 composer.phar 不删除
        assert phar.exists()

    @patch("zfdeploy.build.composer.subprocess.run")
    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("php"))
    def test_download_phar_and_cleanup(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = completed(0)
        response = MagicMock()
        response.content = b"downloaded-phar"

        with patch("zfdeploy.build.composer.httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.get.return_value = response
            installer = DependencyInstaller()
            installer.install(tmp_path)

        assert mock_run.call_args.args[0] == ["/usr/bin/php", str(tmp_path / COMPOSER_PHAR)] + INSTALL_ARGS
        assert not (tmp_path / COMPOSER_PHAR).exists()
        assert installer.downloaded is None

    @patch("zfdeploy.build.composer.subprocess.run")
    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("php"))
    def test_downloaded_phar_removed_on_failure(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = completed(2, "", "Your requirements could not be resolved")
        response = MagicMock()
        response.content = b"downloaded-phar"

        with patch("zfdeploy.build.composer.httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.get.return_value = response
            with pytest.raises(InstallFailedError) as exc_info:
                DependencyInstaller().install(tmp_path)

        assert exc_info.value.exit_code == 2
        assert "could not be resolved" in exc_info.value.output
        assert not (tmp_path / COMPOSER_PHAR).exists()

    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("php"))
    def test_download_failure(self, mock_which, tmp_path):
        with patch("zfdeploy.build.composer.httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.get.side_effect = httpx.ConnectError("offline")
            with pytest.raises(InstallFailedError):
                DependencyInstaller().install(tmp_path)

        assert not (tmp_path / COMPOSER_PHAR).exists()

    @patch("zfdeploy.build.composer.subprocess.run")
    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("composer"))
    def test_nonzero_exit_fails(self, mock_which, mock_run, tmp_path):
        """只看退出码，stderr 有输出但退出码为 0 仍算成功"""
        mock_run.return_value = completed(0, "", "deprecation warning")
        assert DependencyInstaller().install(tmp_path).success

        mock_run.return_value = completed(1, "", "error")
        with pytest.raises(InstallFailedError):
            DependencyInstaller().install(tmp_path)

    @patch("zfdeploy.build.composer.subprocess.run", side_effect=FileNotFoundError("php"))
    @patch("zfdeploy.build.composer.shutil.which", side_effect=which_only("composer"))
    def test_executable_cannot_start(self, mock_which, mock_run, tmp_path):
        with pytest.raises(InstallFailedError):
            DependencyInstaller().install(tmp_path)


class TestRemoveVendorTests:
    """依赖测试目录清理测试"""

    def test_removes_test_dirs(self, tmp_path):
        (tmp_path / "vendor" / "zf" / "zend-db" / "test").mkdir(parents=True)
        (tmp_path / "vendor" / "zf" / "zend-db" / "src").mkdir(parents=True)
        (tmp_path / "vendor" / "acme" / "lib" / "tests").mkdir(parents=True)
        (tmp_path / "vendor" / "acme" / "lib" / "tests" / "FooTest.php").write_text("<?php")

        removed = remove_vendor_tests(tmp_path)

        assert len(removed) == 2
        assert not (tmp_path / "vendor" / "zf" / "zend-db" / "test").exists()
        assert not (tmp_path / "vendor" / "acme" / "lib" / "tests").exists()
        assert (tmp_path / "vendor" / "zf" / "zend-db" / "src").is_dir()

    def test_no_vendor_dir(self, tmp_path):
        assert remove_vendor_tests(tmp_path) == []
