"""
路径工具单元测试
"""

from pathlib import Path

import pytest

from zfdeploy.utils.paths import format_size, get_asset_path, module_path, normalize_module_name, safe_path_join


class TestModulePath:
    """模块路径计算测试"""

    def test_backslashes_normalized(self):
        assert normalize_module_name("ZF\\Apigility") == "ZF/Apigility"
        assert module_path(Path("/app"), "ZF\\Apigility") == Path("/app/module/ZF/Apigility")

    def test_traversal_rejected(self):
        with pytest.raises(ValueError):
            module_path(Path("/app"), "../etc")

    def test_absolute_part_rejected(self):
        with pytest.raises(ValueError):
            safe_path_join(Path("/app"), "/etc")


class TestAssets:
    def test_packaged_assets_present(self):
        assert get_asset_path("zpk", "deployment.xml").is_file()
        assert get_asset_path("zpk", "schema.xsd").is_file()
        assert get_asset_path("zpk", "logo", "zf2-logo.png").is_file()


class TestFormatSize:
    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (2048, "2.0 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
    ])
    def test_format_size(self, size, expected):
        assert format_size(size) == expected
