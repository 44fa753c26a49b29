"""
配置加载器

负责读取/改写应用描述文件（YAML），以及把外部输入转换为经过校验的打包请求。
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import APPLICATION_CONFIG_CANDIDATES, ApplicationConfig, BuildRequest


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误（输入无效）"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
            else:
                formatted.append(msg)

        return "\n".join(formatted)

    def format_errors_json(self) -> str:
        """格式化错误信息为 JSON 格式"""
        cleaned = [
            {'loc': list(e.get('loc', [])), 'msg': e.get('msg', ''), 'type': e.get('type', '')}
            for e in self.errors
        ]
        return json.dumps(cleaned, ensure_ascii=False, indent=2)

    def __str__(self) -> str:
        return self.format_errors() or super().__str__()


def _clean_pydantic_errors(e: ValidationError) -> List[Dict[str, Any]]:
    """去掉 pydantic 在 msg 前加的 'Value error, ' 前缀"""
    errors = []
    for error in e.errors():
        msg = str(error.get('msg', ''))
        if msg.startswith('Value error, '):
            msg = msg[len('Value error, '):]
        errors.append({'loc': list(error.get('loc', [])), 'msg': msg, 'type': error.get('type', '')})
    return errors


class ApplicationConfigLoader:
    """应用描述文件加载器

    使用 ruamel.yaml 的 round-trip 模式，改写 modules 时保留注释和其余键。
    """

    def __init__(self):
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.yaml.width = 4096  # 避免长行自动换行

    def find(self, app_dir: Union[str, Path]) -> Optional[Path]:
        """查找应用描述文件，不存在时返回 None"""
        app_dir = Path(app_dir)
        for candidate in APPLICATION_CONFIG_CANDIDATES:
            path = app_dir / candidate
            if path.is_file():
                return path
        return None

    def _read(self, config_path: Path) -> Any:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw_data = self.yaml.load(f)
        except YAMLError as e:
            raise ConfigError(f"YAML 解析错误: {e}")
        except OSError as e:
            raise ConfigError(f"文件读取错误: {e}")

        if raw_data is None:
            raise ConfigError(f"应用描述文件为空: {config_path}")
        if not isinstance(raw_data, dict):
            raise ConfigError(f"应用描述文件根级别必须是对象/字典格式: {config_path}")
        return raw_data

    def load(self, app_dir: Union[str, Path]) -> ApplicationConfig:
        """加载并校验应用描述文件

        Raises:
            ConfigError: 文件缺失或无法解析
            ConfigValidationError: modules 列表缺失或为空
        """
        config_path = self.find(app_dir)
        if config_path is None:
            raise ConfigError(f"应用描述文件不存在: {Path(app_dir) / APPLICATION_CONFIG_CANDIDATES[0]}")

        raw_data = self._read(config_path)
        try:
            return ApplicationConfig.model_validate(dict(raw_data))
        except ValidationError as e:
            raise ConfigValidationError("应用描述文件验证失败", _clean_pydantic_errors(e))

    def rewrite_modules(self, app_dir: Union[str, Path], keep: Callable[[str], bool]) -> List[str]:
        """就地改写 modules 列表，只保留 keep(name) 为真的条目

        Returns:
            List[str]: 被移除的模块名
        """
        config_path = self.find(app_dir)
        if config_path is None:
            raise ConfigError(f"应用描述文件不存在: {Path(app_dir) / APPLICATION_CONFIG_CANDIDATES[0]}")

        data = self._read(config_path)
        modules = data.get('modules')
        if not isinstance(modules, list):
            raise ConfigError(f"应用描述文件中没有 modules 列表: {config_path}")

        removed = []
        # 倒序删除，保留 CommentedSeq 本身以及其中的注释
        for index in reversed(range(len(modules))):
            name = str(modules[index])
            if not keep(name):
                removed.insert(0, name)
                del modules[index]

        if removed:
            try:
                with open(config_path, 'w', encoding='utf-8') as f:
                    self.yaml.dump(data, f)
            except OSError as e:
                raise ConfigError(f"写入应用描述文件失败: {e}")

        return removed


# 全局加载器实例
application_loader = ApplicationConfigLoader()


def find_application_config(app_dir: Union[str, Path]) -> Optional[Path]:
    """便捷函数：查找应用描述文件"""
    return application_loader.find(app_dir)


def load_application_config(app_dir: Union[str, Path]) -> ApplicationConfig:
    """便捷函数：加载应用描述文件"""
    return application_loader.load(app_dir)


def create_build_request(**values: Any) -> BuildRequest:
    """创建并校验打包请求

    Raises:
        ConfigValidationError: 任一输入无效
    """
    values = {k: v for k, v in values.items() if v is not None}
    try:
        return BuildRequest(**values)
    except ValidationError as e:
        raise ConfigValidationError("打包参数验证失败", _clean_pydantic_errors(e))


def validate_application(app_dir: Union[str, Path]) -> List[Dict[str, Any]]:
    """验证应用目录并返回错误列表，空列表表示验证通过"""
    app_dir = Path(app_dir)
    if not app_dir.is_dir():
        return [{'loc': [], 'msg': f"应用路径 \"{app_dir}\" 无效", 'type': 'config_error'}]
    try:
        load_application_config(app_dir)
        return []
    except ConfigValidationError as e:
        return e.errors
    except ConfigError as e:
        return [{'loc': [], 'msg': str(e), 'type': 'config_error'}]
