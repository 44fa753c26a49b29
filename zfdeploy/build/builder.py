"""
构建器主类

对外提供统一的打包接口，把管道中的异常转换为 BuildResult。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List

from ..config.schema import BuildRequest
from .build_pipeline import BuildPipeline
from .build_context import BuildError, InstallFailedError, ProgressCallback
from .workspace import WorkspaceManager


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    output_path: Optional[Path] = None
    output_size: Optional[int] = None
    file_count: Optional[int] = None
    build_time: Optional[float] = None
    error: Optional[str] = None
    # composer 失败时的输出
    details: Optional[str] = None


class Builder:
    """包构建器

    使用管道模式协调打包步骤，提供统一的构建接口。
    """

    def __init__(self, workspace_manager: Optional[WorkspaceManager] = None):
        self.pipeline = BuildPipeline(workspace_manager)

    def build(
        self,
        request: BuildRequest,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildResult:
        """生成包文件

        Args:
            request: 已校验的打包请求
            progress_callback: 进度回调函数

        Returns:
            BuildResult: 构建结果，失败时 success 为 False
        """
        try:
            context = self.pipeline.execute(request, progress_callback)
        except BuildError as e:
            details = e.output if isinstance(e, InstallFailedError) and e.output else None
            return BuildResult(success=False, error=str(e), details=details)

        stats = context.build_stats
        output_path = Path(request.output_path)
        return BuildResult(
            success=True,
            output_path=output_path,
            output_size=output_path.stat().st_size if output_path.exists() else None,
            file_count=stats.get('total_files'),
            build_time=stats['end_time'] - stats['start_time'],
        )

    def get_pipeline(self) -> BuildPipeline:
        """获取构建管道，用于自定义打包流程"""
        return self.pipeline

    def validate_build_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        return self.pipeline.validate_pipeline()
