"""
构建上下文模块

定义打包过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from ..config.schema import ApplicationConfig, BuildRequest

if TYPE_CHECKING:
    from .composer import InstallResult

# 进度回调类型: (阶段, 当前, 总数, 消息)
ProgressCallback = Callable[[str, int, int, str], None]


@dataclass
class BuildContext:
    """构建上下文，包含一次打包过程中的共享数据"""
    request: BuildRequest
    app_config: ApplicationConfig
    progress_callback: Optional[ProgressCallback] = None

    # 临时工作区根目录；zpk 时应用文件放在 workspace/data 下
    workspace: Optional[Path] = None
    staging_dir: Optional[Path] = None

    install_result: Optional['InstallResult'] = None

    # 统计信息
    build_stats: Dict[str, Any] = None  # type: ignore

    def __post_init__(self):
        if self.build_stats is None:
            self.build_stats = {
                'start_time': 0,
                'end_time': 0,
                'copied_files': 0,
                'total_files': 0,
                'total_size': 0,
                'output_size': 0,
            }

    @property
    def archive_root(self) -> Optional[Path]:
        """打包时遍历的根目录：始终是工作区根目录（zpk 的 data/ 的上一级）"""
        return self.workspace

    def report_progress(self, stage: str, current: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, current, 100, message)


class BuildError(Exception):
    """构建错误"""
    pass


class SchemaValidationError(BuildError):
    """deployment.xml 未通过 schema 校验"""

    def __init__(self, message: str, path: Optional[Path] = None, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


class TempDirExhaustedError(BuildError):
    """多次尝试仍无法创建唯一的临时目录"""
    pass


class InstallFailedError(BuildError):
    """composer install 执行失败"""

    def __init__(self, message: str, output: str = "", exit_code: Optional[int] = None):
        super().__init__(message)
        self.output = output
        self.exit_code = exit_code


class UnknownFormatError(BuildError):
    """不支持的打包格式"""
    pass


class ArchiveIOError(BuildError):
    """写入包文件时发生 IO 错误"""
    pass
