"""
路径工具

提供路径处理相关的工具函数。
"""

import os
from pathlib import Path
from typing import Union

# 随包分发的资源目录（zpk 模板、schema、logo、部署脚本）
ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def normalize_path(path: Union[str, Path]) -> str:
    """规范化为绝对路径字符串，用于排除集合的比较"""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def normalize_module_name(module: str) -> str:
    """模块名中的反斜杠统一替换为正斜杠（命名空间模块如 ZF\\Apigility）"""
    return module.replace('\\', '/').strip('/')


def safe_path_join(*parts: Union[str, Path]) -> Path:
    """安全的路径拼接（防止目录穿越）

    Args:
        *parts: 路径部分

    Returns:
        Path: 拼接后的路径

    Raises:
        ValueError: 检测到目录穿越尝试
    """
    if not parts:
        return Path(".")

    result = Path(parts[0])

    for part in parts[1:]:
        part_path = Path(part)

        if any(p == ".." for p in part_path.parts):
            raise ValueError(f"检测到目录穿越尝试: {part}")

        if part_path.is_absolute():
            raise ValueError(f"不允许使用绝对路径: {part}")

        result = result / part_path

    return result


def module_path(app_dir: Union[str, Path], module: str) -> Path:
    """计算模块在应用中的目录 app_dir/module/<name>"""
    return safe_path_join(app_dir, "module", normalize_module_name(module))


def get_asset_path(*parts: str) -> Path:
    """获取随包分发的资源文件路径"""
    return safe_path_join(ASSETS_DIR, *parts)


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
