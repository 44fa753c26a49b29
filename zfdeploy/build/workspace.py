"""
临时工作区管理

每次打包独占一个临时目录，打包结束后无论成功与否都会删除。
"""

import os
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Optional, Union

from ..utils.logging import get_stage_logger, LogStage
from .build_context import TempDirExhaustedError

WORKSPACE_PREFIX = "ZFDeploy_"
MAX_ATTEMPTS = 3

logger = get_stage_logger(LogStage.WORKSPACE)


def _unique_name() -> str:
    return WORKSPACE_PREFIX + uuid.uuid4().hex[:13]


class WorkspaceManager:
    """临时工作区管理器"""

    def __init__(
        self,
        temp_root: Optional[Union[str, Path]] = None,
        name_factory: Callable[[], str] = _unique_name,
    ):
        self.temp_root = Path(temp_root or tempfile.gettempdir())
        self.name_factory = name_factory

    def create(self) -> Path:
        """创建临时工作区

        最多尝试 MAX_ATTEMPTS 次生成不冲突的目录名。

        Raises:
            TempDirExhaustedError: 每次生成的目录都已存在
        """
        for attempt in range(1, MAX_ATTEMPTS + 1):
            path = self.temp_root / self.name_factory()
            if path.exists():
                logger.debug(f"临时目录已存在，重试 ({attempt}/{MAX_ATTEMPTS}): {path}")
                continue
            try:
                path.mkdir(parents=True)
            except FileExistsError:
                continue
            logger.debug(f"创建临时工作区: {path}")
            return path

        raise TempDirExhaustedError(f"无法在 {self.temp_root} 中创建临时目录")

    def destroy(self, path: Union[str, Path]) -> bool:
        """递归删除工作区

        先尝试按文件删除，失败的条目再按目录递归删除。删除失败只记录警告。

        Returns:
            bool: 目录是否已不存在
        """
        path = os.fspath(path)
        try:
            entries = list(os.scandir(path))
        except OSError as e:
            logger.warning(f"无法打开目录 {path}: {e}")
            return not os.path.exists(path)

        for entry in entries:
            try:
                os.unlink(entry.path)
            except OSError:
                self.destroy(entry.path)

        try:
            os.rmdir(path)
        except OSError as e:
            logger.warning(f"无法删除目录 {path}: {e}")
            return False
        return True
