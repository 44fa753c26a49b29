"""
目录树复制

按排除集合把源目录复制到目标目录，每一级目录重新读取自己的 .gitignore。
"""

import os
import shutil
from pathlib import Path
from typing import FrozenSet, Iterable, List, Tuple, Union

from ..utils.logging import debug, warning, LogStage
from .exclusions import ExclusionSet, compute_exclusions

# 无论如何都不复制的目录项
ALWAYS_SKIPPED = frozenset({".git"})

# 源目录不可写时新建目录使用的权限
DEFAULT_DIR_MODE = 0o775


class TreeCopier:
    """目录树复制器

    使用 (源目录, 目标目录, 排除集合) 工作队列代替递归，子目录的排除集合
    由父目录的集合加上子目录自己的 .gitignore 条目组成。
    """

    def __init__(self):
        self.copied_files: int = 0
        self.copied_bytes: int = 0
        self.skipped: List[str] = []

    def copy(
        self,
        source: Union[str, Path],
        dest: Union[str, Path],
        exclusions: Iterable[Union[str, Path]] = (),
        use_gitignore: bool = True,
    ) -> int:
        """复制目录树

        Args:
            source: 源目录
            dest: 目标目录（不存在时自动创建）
            exclusions: 调用方给出的排除路径（绝对路径）
            use_gitignore: 是否按各级 .gitignore 排除

        Returns:
            int: 本次复制的文件数

        源目录无法打开时视为没有可复制的内容，不抛出异常。
        """
        source = os.path.abspath(os.fspath(source))
        dest = os.path.abspath(os.fspath(dest))
        copied_before = self.copied_files

        if not os.path.isdir(source):
            debug(f"源目录不存在，跳过复制: {source}", stage=LogStage.COPY)
            return 0

        self._make_directory(source, dest)

        # 每个工作项带上祖先目录的真实路径，用于识别指回祖先的符号链接
        worklist: List[Tuple[str, str, ExclusionSet, FrozenSet[str]]] = [
            (source, dest, compute_exclusions(source, exclusions, use_gitignore),
             frozenset({os.path.realpath(source)}))
        ]

        while worklist:
            src_dir, dst_dir, excluded, ancestors = worklist.pop()

            try:
                entries = sorted(os.scandir(src_dir), key=lambda e: e.name)
            except OSError as e:
                # 无权限访问或目录已消失
                debug(f"无法打开目录 {src_dir}: {e}", stage=LogStage.COPY)
                continue

            for entry in entries:
                if entry.name in ALWAYS_SKIPPED:
                    continue

                src_path = os.path.join(src_dir, entry.name)
                if src_path in excluded:
                    self.skipped.append(src_path)
                    continue

                dst_path = os.path.join(dst_dir, entry.name)
                try:
                    is_dir = entry.is_dir()
                except OSError as e:
                    debug(f"无法访问 {src_path}: {e}", stage=LogStage.COPY)
                    continue

                if not is_dir:
                    self._copy_file(src_path, dst_path)
                    continue

                real_path = os.path.realpath(src_path)
                if real_path in ancestors:
                    debug(f"跳过指向上级目录的符号链接: {src_path}", stage=LogStage.COPY)
                    self.skipped.append(src_path)
                    continue

                try:
                    self._make_directory(src_path, dst_path)
                except OSError as e:
                    debug(f"无法创建目录 {dst_path}: {e}", stage=LogStage.COPY)
                    continue
                worklist.append((
                    src_path,
                    dst_path,
                    compute_exclusions(src_path, excluded, use_gitignore),
                    ancestors | {real_path},
                ))

        return self.copied_files - copied_before

    def _make_directory(self, source: str, dest: str) -> None:
        os.makedirs(dest, exist_ok=True)
        try:
            if os.access(source, os.W_OK):
                shutil.copymode(source, dest)
            else:
                os.chmod(dest, DEFAULT_DIR_MODE)
        except OSError as e:
            debug(f"无法设置目录权限 {dest}: {e}", stage=LogStage.COPY)

    def _copy_file(self, source: str, dest: str) -> None:
        # shutil.copy 复制内容和权限位
        try:
            shutil.copy(source, dest)
        except OSError as e:
            # 失效的符号链接等无法读取的文件
            warning(f"无法复制文件 {source}: {e}", stage=LogStage.COPY)
            return
        self.copied_files += 1
        self.copied_bytes += os.path.getsize(dest)


def copy_tree(
    source: Union[str, Path],
    dest: Union[str, Path],
    exclusions: Iterable[Union[str, Path]] = (),
    use_gitignore: bool = True,
) -> int:
    """便捷函数：复制目录树，返回复制的文件数"""
    return TreeCopier().copy(source, dest, exclusions, use_gitignore)
