"""
应用复制步骤模块

按排除规则把应用目录复制到暂存目录。
"""

from pathlib import Path
from typing import List

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from zfdeploy.build.build_context import BuildContext, BuildError
from zfdeploy.build.copier import TreeCopier
from .build_step import BuildStep


class ApplicationCopyStep(BuildStep):
    """应用复制步骤"""

    def __init__(self):
        super().__init__("copy", "复制应用文件")

    def get_progress_range(self) -> tuple[int, int]:
        return (10, 40)

    @staticmethod
    def build_exclusions(context: BuildContext) -> List[Path]:
        """调用方排除路径：不含 vendor 时排除 vendor 和 composer.lock，指定模块时排除 module/"""
        request = context.request
        source = Path(request.source_path).resolve()
        excluded = []
        if not request.include_vendor:
            excluded.append(source / "composer.lock")
            excluded.append(source / "vendor")
        if request.modules:
            excluded.append(source / "module")
        return excluded

    def execute(self, context: BuildContext) -> None:
        if context.staging_dir is None:
            context.staging_dir = context.workspace
        if context.staging_dir is None:
            raise BuildError("暂存目录未创建")

        request = context.request
        source = Path(request.source_path).resolve()
        exclusions = self.build_exclusions(context)

        info(f"复制应用: {source} -> {context.staging_dir}", stage=LogStage.COPY)
        for path in exclusions:
            debug(f"排除: {path}", stage=LogStage.COPY)
        if not request.use_gitignore:
            debug("不读取 .gitignore", stage=LogStage.COPY)
        self.report_start(context, "复制文件...")

        copier = TreeCopier()
        try:
            copier.copy(source, context.staging_dir, exclusions, request.use_gitignore)
        except OSError as e:
            error(f"复制应用失败: {e}", stage=LogStage.COPY)
            raise BuildError(f"复制应用失败: {e}") from e

        context.build_stats['copied_files'] = copier.copied_files
        context.build_stats['total_size'] = copier.copied_bytes

        self.report_end(context, f"已复制 {copier.copied_files} 个文件")
        success(f"复制完成: {copier.copied_files} 个文件, {format_size(copier.copied_bytes)}", stage=LogStage.COPY)
        if copier.skipped:
            debug(f"跳过 {len(copier.skipped)} 个条目", stage=LogStage.COPY)
