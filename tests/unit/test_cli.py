"""
命令行接口单元测试
"""

import json
import zipfile
from unittest.mock import patch

from typer.testing import CliRunner

from zfdeploy import __version__
from zfdeploy.cli.main import app


runner = CliRunner()


class TestMainCommand:
    """全局选项与 info 命令测试"""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "tar.gz" in result.stdout
        assert "zpk" in result.stdout


class TestBuildCommand:
    """build 命令测试"""

    def test_build_zip(self, sample_app, out_dir):
        output = out_dir / "app.zip"
        result = runner.invoke(app, [
            "build", str(output), "--target", str(sample_app), "--composer", "off",
        ])

        assert result.exit_code == 0, result.output
        with zipfile.ZipFile(output) as zf:
            assert "public/index.php" in zf.namelist()

    def test_build_modules_and_vendor(self, sample_app, out_dir):
        output = out_dir / "app.zip"
        result = runner.invoke(app, [
            "build", str(output), "--target", str(sample_app), "--modules", "Application", "-e",
        ])

        assert result.exit_code == 0, result.output
        with zipfile.ZipFile(output) as zf:
            names = zf.namelist()
        assert "vendor/zf/zfcbase/Module.php" in names
        assert not any(n.startswith("module/Test/") for n in names)

    def test_invalid_switch_value(self, sample_app, out_dir):
        result = runner.invoke(app, [
            "build", str(out_dir / "app.zip"), "--target", str(sample_app), "--composer", "maybe",
        ])

        assert result.exit_code != 0
        assert not (out_dir / "app.zip").exists()

    def test_invalid_package_suffix(self, sample_app, out_dir):
        result = runner.invoke(app, [
            "build", str(out_dir / "app.rar"), "--target", str(sample_app),
        ])

        assert result.exit_code == 1
        assert "app.rar" in result.output
        assert list(out_dir.iterdir()) == []

    def test_missing_module(self, sample_app, out_dir):
        result = runner.invoke(app, [
            "build", str(out_dir / "app.zip"), "--target", str(sample_app), "--modules", "Nope",
        ])

        assert result.exit_code == 1
        assert "Nope" in result.output

    @patch("zfdeploy.build.composer.shutil.which", return_value="/usr/bin/composer")
    def test_composer_failure_exit_code(self, mock_which, sample_app, out_dir):
        import subprocess

        with patch(
            "zfdeploy.build.composer.subprocess.run",
            return_value=subprocess.CompletedProcess([], 3, "", "cannot resolve"),
        ):
            result = runner.invoke(app, ["build", str(out_dir / "app.zip"), "--target", str(sample_app)])

        assert result.exit_code == 1
        assert "cannot resolve" in result.output

    def test_log_file(self, sample_app, out_dir, tmp_path):
        log_file = tmp_path / "logs" / "build.log"
        result = runner.invoke(app, [
            "build", str(out_dir / "app.tar"), "--target", str(sample_app),
            "--composer", "off", "--log-file", str(log_file),
        ])

        assert result.exit_code == 0, result.output
        assert "ARCHIVE" in log_file.read_text(encoding="utf-8-sig")


class TestValidateCommand:
    """validate 命令测试"""

    def test_valid_application(self, sample_app):
        result = runner.invoke(app, ["validate", "--target", str(sample_app)])
        assert result.exit_code == 0

    def test_invalid_application_json(self, tmp_path):
        result = runner.invoke(app, ["validate", "--target", str(tmp_path), "--json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error_count"] >= 1

    def test_invalid_deployment_xml(self, sample_app, invalid_deployment_xml):
        result = runner.invoke(app, [
            "validate", "--target", str(sample_app), "--deploymentxml", str(invalid_deployment_xml), "--json",
        ])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert all(e["type"] == "schema_error" for e in data["errors"])
