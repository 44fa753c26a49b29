"""
打包步骤模块

把工作区写成最终的包文件。
"""

from pathlib import Path
from typing import Optional

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from zfdeploy.build.archiver import Archiver
from zfdeploy.build.build_context import BuildContext, BuildError
from .build_step import BuildStep


class ArchiveStep(BuildStep):
    """打包步骤"""

    def __init__(self):
        super().__init__("archive", "生成包文件")

    def get_progress_range(self) -> tuple[int, int]:
        return (80, 100)

    def execute(self, context: BuildContext) -> None:
        request = context.request
        output_path = Path(request.output_path)
        info(f"生成包文件 - 格式: {request.archive_format.value}, 输出: {output_path}", stage=LogStage.ARCHIVE)
        self.report_start(context, "开始打包...")

        def archive_progress(current: int, total: int, current_file: Optional[str] = None) -> None:
            if context.progress_callback and total > 0:
                start, end = self.get_progress_range()
                percent = int((current / total) * (end - start)) + start
                message = f"打包: {Path(current_file).name}" if current_file else "打包中..."
                context.report_progress(self.description, percent, message)

        archiver = Archiver()
        try:
            file_count, total_bytes = archiver.archive(
                context.archive_root,
                output_path,
                request.archive_format,
                archive_progress,
            )
        except BuildError as e:
            error(f"打包失败: {e}", stage=LogStage.ARCHIVE)
            raise

        output_size = output_path.stat().st_size
        context.build_stats['total_files'] = file_count
        context.build_stats['total_size'] = total_bytes
        context.build_stats['output_size'] = output_size

        self.report_end(context, f"打包完成，大小: {format_size(output_size)}")
        success("打包完成", stage=LogStage.ARCHIVE)
        info(f"  文件数: {file_count}")
        info(f"  原始大小: {format_size(total_bytes)}")
        info(f"  包大小: {format_size(output_size)}")
        debug(f"包文件={output_path} bytes={output_size}", stage=LogStage.ARCHIVE)
