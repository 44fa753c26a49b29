"""
模块选择步骤模块

只在指定了 --modules 时生效。
"""

from ...config.loader import ConfigError
from ...utils.logging import info, success, error, LogStage
from zfdeploy.build.build_context import BuildContext, BuildError
from zfdeploy.build.modules import ModuleSelector
from .build_step import BuildStep


class ModuleSelectionStep(BuildStep):
    """模块选择步骤"""

    def __init__(self):
        super().__init__("modules", "选择模块")

    def get_progress_range(self) -> tuple[int, int]:
        return (40, 50)

    def should_run(self, context: BuildContext) -> bool:
        return bool(context.request.modules)

    def execute(self, context: BuildContext) -> None:
        request = context.request
        info(f"只打包模块: {', '.join(request.modules)}", stage=LogStage.MODULES)
        self.report_start(context, "复制模块...")

        selector = ModuleSelector(use_gitignore=request.use_gitignore)
        try:
            removed = selector.restrict(request.source_path, context.staging_dir, request.modules)
        except (ConfigError, OSError) as e:
            error(f"模块选择失败: {e}", stage=LogStage.MODULES)
            raise BuildError(f"模块选择失败: {e}") from e

        context.build_stats['removed_modules'] = removed
        self.report_end(context, "模块选择完成")
        success(f"已复制 {len(request.modules)} 个模块", stage=LogStage.MODULES)
