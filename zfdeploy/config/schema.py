"""
配置 Schema 定义

使用 Pydantic 定义打包请求与应用描述文件的模型，构造即校验。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

# 应用描述文件候选位置（相对于应用根目录）
APPLICATION_CONFIG_CANDIDATES = (
    "config/application.config.yaml",
    "config/application.config.yml",
)

APIGILITY_MODULE = "ZF\\Apigility"


def default_app_version() -> str:
    """默认的应用版本号：当前时间"""
    return datetime.now().strftime("%Y-%m-%d_%H:%M")


class ArchiveFormat(str, Enum):
    """打包格式枚举"""
    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    TGZ = "tgz"
    ZPK = "zpk"

    @property
    def suffix(self) -> str:
        return f".{self.value}"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> Optional['ArchiveFormat']:
        """根据文件名后缀识别格式，无法识别时返回 None"""
        name = Path(path).name
        for fmt in cls:
            if name.endswith(fmt.suffix) and len(name) > len(fmt.suffix):
                return fmt
        return None

    @classmethod
    def values(cls) -> List[str]:
        return [fmt.value for fmt in cls]


def intermediate_paths(output_path: Path, fmt: ArchiveFormat) -> List[Path]:
    """tar.gz / tgz 打包过程中会写出再删除的中间文件: <stem>.tar，tgz 还有 <stem>.tar.gz"""
    if fmt not in (ArchiveFormat.TAR_GZ, ArchiveFormat.TGZ):
        return []
    stem = output_path.name[:-len(fmt.suffix)]
    paths = [output_path.with_name(stem + ArchiveFormat.TAR.suffix)]
    if fmt == ArchiveFormat.TGZ:
        paths.append(output_path.with_name(stem + ArchiveFormat.TAR_GZ.suffix))
    return paths


class ApplicationConfig(BaseModel):
    """应用描述文件模型

    只约束 modules 列表，其余键原样保留。
    """
    modules: List[str] = Field(..., description="按加载顺序排列的模块列表", min_length=1)

    model_config = {
        "extra": "allow",
    }

    @field_validator('modules')
    @classmethod
    def validate_modules(cls, v: List[str]) -> List[str]:
        if any(not str(m).strip() for m in v):
            raise ValueError("模块名不能为空")
        return [str(m) for m in v]

    def has_module(self, name: str) -> bool:
        return name in self.modules

    @property
    def uses_apigility(self) -> bool:
        return self.has_module(APIGILITY_MODULE)


class BuildRequest(BaseModel):
    """打包请求模型

    所有校验都在构造时完成，且只读取文件系统，不做任何修改。
    """

    source_path: Path = Field(default_factory=Path.cwd, description="应用根目录")
    output_path: Path = Field(..., description="要生成的包文件路径")
    modules: List[str] = Field(default_factory=list, description="只打包这些模块（为空表示全部）")
    include_vendor: bool = Field(False, description="是否包含 vendor 目录")
    use_composer: bool = Field(True, description="是否执行 composer install")
    use_gitignore: bool = Field(True, description="是否按 .gitignore 排除文件")
    configs_dir: Optional[Path] = Field(None, description="额外配置文件目录，复制到 config/autoload")
    deployment_xml: Optional[Path] = Field(None, description="自定义 deployment.xml（仅 zpk）")
    zpk_data_dir: Optional[Path] = Field(None, description="zpk 资源目录（仅 zpk）")
    app_version: str = Field(default_factory=default_app_version, description="应用版本号（仅 zpk）", min_length=1)
    strip_vendor_tests: bool = Field(True, description="composer 安装后删除依赖中的测试目录")

    model_config = {
        "extra": "forbid",
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator('output_path')
    @classmethod
    def validate_output_path(cls, v: Path) -> Path:
        """校验包文件后缀，且包文件和打包时的中间文件都不能已存在"""
        fmt = ArchiveFormat.from_path(v)
        if fmt is None:
            raise ValueError(
                f"无法识别包文件 \"{v}\" 的格式，支持的格式: {', '.join(ArchiveFormat.values())}"
            )
        if v.exists():
            raise ValueError(f"包文件 \"{v}\" 已存在")
        for path in intermediate_paths(v, fmt):
            if path.exists():
                raise ValueError(f"打包时需要使用的中间文件 \"{path}\" 已存在")
        return v

    @field_validator('modules', mode='before')
    @classmethod
    def validate_modules(cls, v: Any) -> List[str]:
        """支持逗号分隔字符串；去空白、去重并保持顺序"""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(',')

        modules: List[str] = []
        for module in v:
            module = str(module).strip()
            if module and module not in modules:
                modules.append(module)
        return modules

    @field_validator('source_path')
    @classmethod
    def validate_source_path(cls, v: Path) -> Path:
        if not v.is_dir():
            raise ValueError(f"应用路径 \"{v}\" 无效")
        return v

    @field_validator('configs_dir')
    @classmethod
    def validate_configs_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None and not v.is_dir():
            raise ValueError(f"配置目录 \"{v}\" 不存在")
        return v

    @field_validator('deployment_xml')
    @classmethod
    def validate_deployment_xml(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return None
        from ..utils.xml_schema import get_schema_errors

        if not v.is_file():
            raise ValueError(f"deployment XML 文件 \"{v}\" 不存在")
        errors = get_schema_errors(v)
        if errors:
            raise ValueError(f"deployment XML 文件 \"{v}\" 无效: {'; '.join(errors)}")
        return v

    @field_validator('zpk_data_dir')
    @classmethod
    def validate_zpk_data_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return None
        from ..utils.xml_schema import get_schema_errors

        if not v.is_dir():
            raise ValueError(f"zpk 资源目录 \"{v}\" 不存在")
        manifest = v / "deployment.xml"
        if not manifest.is_file():
            raise ValueError(f"zpk 资源目录 \"{v}\" 中没有 deployment.xml 文件")
        errors = get_schema_errors(manifest)
        if errors:
            raise ValueError(f"deployment XML 文件 \"{manifest}\" 无效: {'; '.join(errors)}")
        return v

    @model_validator(mode='after')
    def validate_application(self) -> 'BuildRequest':
        """校验应用描述文件以及请求的模块是否存在"""
        from ..utils.paths import module_path
        from .loader import ConfigError, find_application_config, load_application_config

        source = self.source_path
        if find_application_config(source) is None:
            raise ValueError(f"目录 \"{source}\" 不是标准的 ZF2 应用（缺少 config/application.config.yaml）")
        try:
            load_application_config(source)
        except ConfigError as e:
            raise ValueError(f"目录 \"{source}\" 不是标准的 ZF2 应用: {e}")

        for module in self.modules:
            try:
                path = module_path(source, module)
            except ValueError as e:
                raise ValueError(f"模块名 \"{module}\" 无效: {e}")
            if not path.is_dir():
                raise ValueError(f"模块 \"{module}\" 不存在于 {source}")

        return self

    @property
    def archive_format(self) -> ArchiveFormat:
        fmt = ArchiveFormat.from_path(self.output_path)
        assert fmt is not None  # 已在 validate_output_path 中保证
        return fmt

    @property
    def package_name(self) -> str:
        """包名：输出文件名去掉格式后缀"""
        return self.output_path.name[:-len(self.archive_format.suffix)]

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（Path/枚举转为字符串）"""
        data = self.model_dump(exclude_none=True)
        return {k: str(v) if isinstance(v, (Path, Enum)) else v for k, v in data.items()}
