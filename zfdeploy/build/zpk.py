"""
ZPK 预处理

在复制应用之前搭建 Zend Server 包的目录结构：
    deployment.xml   部署描述文件
    scripts/         部署钩子脚本
    <logo>.png       图标
    data/            应用文件（随后复制进来）
"""

import shutil
from pathlib import Path
from typing import Optional

from ..config.schema import ApplicationConfig
from ..utils.logging import info, debug, LogStage
from ..utils.paths import ensure_directory, get_asset_path
from ..utils.xml_schema import DEPLOYMENT_SCHEMA, get_schema_errors
from .build_context import SchemaValidationError
from .copier import copy_tree

MANIFEST_FILE = "deployment.xml"
DATA_DIR = "data"
SCRIPTS_DIR = "scripts"

DEFAULT_LOGO = "zf2-logo.png"
APIGILITY_LOGO = "apigility-logo.png"


class ZpkStager:
    """ZPK 目录结构搭建器"""

    def __init__(self, assets_dir: Optional[Path] = None, schema_path: Optional[Path] = None):
        self.assets_dir = Path(assets_dir or get_asset_path("zpk"))
        self.schema_path = Path(schema_path or DEPLOYMENT_SCHEMA)

    @property
    def template_path(self) -> Path:
        return self.assets_dir / MANIFEST_FILE

    def stage(
        self,
        workspace: Path,
        app_name: str,
        version: str,
        deployment_xml: Optional[Path],
        zpk_data_dir: Optional[Path],
        app_config: ApplicationConfig,
    ) -> Path:
        """搭建 zpk 目录结构

        Args:
            workspace: 临时工作区根目录
            app_name: 包名（替换 {NAME}）
            version: 应用版本（替换 {VERSION}）
            deployment_xml: 用户指定的 deployment.xml
            zpk_data_dir: 用户指定的 zpk 资源目录
            app_config: 应用描述，用于选择 logo

        Returns:
            Path: 应用文件的复制目标 workspace/data

        Raises:
            SchemaValidationError: 最终的 deployment.xml 未通过校验
        """
        workspace = Path(workspace)
        manifest = workspace / MANIFEST_FILE

        if zpk_data_dir:
            info(f"复制 zpk 资源目录: {zpk_data_dir}", stage=LogStage.ZPK)
            copy_tree(zpk_data_dir, workspace)

        data_dir = ensure_directory(workspace / DATA_DIR)

        logo = ""
        if not zpk_data_dir:
            self._copy_scripts(workspace / SCRIPTS_DIR)
            logo = self._copy_logo(workspace, app_config)

        if deployment_xml:
            debug(f"使用自定义 deployment.xml: {deployment_xml}", stage=LogStage.ZPK)
            shutil.copyfile(deployment_xml, manifest)
            self._validate(manifest, user_file=Path(deployment_xml))
        elif zpk_data_dir:
            self._validate(manifest, user_file=Path(zpk_data_dir) / MANIFEST_FILE)
        else:
            self.render_manifest(manifest, app_name, version, logo)
            self._validate(manifest, user_file=None)

        return data_dir

    def render_manifest(self, target: Path, app_name: str, version: str, logo: str) -> Path:
        """用默认模板生成 deployment.xml（占位符原样替换，不做转义）"""
        content = self.template_path.read_text(encoding='utf-8')
        content = content.replace('{NAME}', app_name)
        content = content.replace('{VERSION}', version)
        content = content.replace('{LOGO}', logo)
        target.write_text(content, encoding='utf-8')
        return target

    def _copy_scripts(self, scripts_dir: Path) -> None:
        ensure_directory(scripts_dir)
        for script in sorted((self.assets_dir / SCRIPTS_DIR).glob("*.php")):
            shutil.copy(script, scripts_dir / script.name)
            debug(f"复制部署脚本: {script.name}", stage=LogStage.ZPK)

    def _copy_logo(self, workspace: Path, app_config: ApplicationConfig) -> str:
        logo = APIGILITY_LOGO if app_config.uses_apigility else DEFAULT_LOGO
        shutil.copyfile(self.assets_dir / "logo" / logo, workspace / logo)
        debug(f"使用 logo: {logo}", stage=LogStage.ZPK)
        return logo

    def _validate(self, manifest: Path, user_file: Optional[Path]) -> None:
        errors = get_schema_errors(manifest, self.schema_path)
        if not errors:
            return

        if user_file is not None:
            message = f"deployment XML 文件 \"{user_file}\" 未通过 schema 校验"
        else:
            message = f"默认的 deployment.xml 模板 \"{self.template_path}\" 无效，请检查安装包资源"
        raise SchemaValidationError(message, path=user_file or manifest, errors=errors)


def stage_zpk(
    workspace: Path,
    app_name: str,
    version: str,
    deployment_xml: Optional[Path],
    zpk_data_dir: Optional[Path],
    app_config: ApplicationConfig,
) -> Path:
    """便捷函数：搭建 zpk 目录结构，返回 data 目录"""
    return ZpkStager().stage(workspace, app_name, version, deployment_xml, zpk_data_dir, app_config)
