"""
排除集合计算

根据调用方给出的排除路径和目录内的 .gitignore，计算某个目录下需要跳过的绝对路径集合。

.gitignore 只做简化处理：每行是相对于所在目录的文件名或 glob 模式，
不支持取反（!）和 ** 递归语义。
"""

import glob
import os
from pathlib import Path
from typing import FrozenSet, Iterable, List, Union

from ..utils.paths import normalize_path

# 规范化后的绝对路径集合
ExclusionSet = FrozenSet[str]

GITIGNORE_FILE = ".gitignore"


def read_gitignore(path: Union[str, Path]) -> List[str]:
    """读取 .gitignore 中的模式

    空行和 # 开头的注释行会被忽略。
    """
    patterns = []
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            pattern = line.strip()
            if not pattern or pattern.startswith('#'):
                continue
            patterns.append(pattern)
    return patterns


def expand_pattern(source_dir: str, pattern: str) -> List[str]:
    """把单个模式展开为 source_dir 下的绝对路径

    模式直接拼接在目录后面，所以前导 / 表示锚定在该目录，结尾 / 仍然能匹配目录。
    """
    candidate = f"{source_dir}/{pattern}"
    if os.path.isfile(candidate):
        return [normalize_path(candidate)]
    return [normalize_path(match) for match in glob.glob(f"{glob.escape(source_dir)}/{pattern}")]


def compute_exclusions(
    source_dir: Union[str, Path],
    caller_exclusions: Iterable[Union[str, Path]] = (),
    use_gitignore: bool = True,
) -> ExclusionSet:
    """计算目录的排除集合

    Args:
        source_dir: 正在复制的目录
        caller_exclusions: 调用方给出的排除路径（绝对路径）
        use_gitignore: 是否读取 source_dir/.gitignore

    Returns:
        ExclusionSet: 需要排除的绝对路径集合
    """
    excluded = {normalize_path(path) for path in caller_exclusions}

    source = normalize_path(source_dir)
    gitignore = os.path.join(source, GITIGNORE_FILE)
    if use_gitignore and os.path.isfile(gitignore):
        for pattern in read_gitignore(gitignore):
            excluded.update(expand_pattern(source, pattern))

    return frozenset(excluded)


def is_excluded(path: Union[str, Path], exclusions: ExclusionSet) -> bool:
    """路径是否在排除集合中"""
    return normalize_path(path) in exclusions
