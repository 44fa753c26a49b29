"""
构建管道模块

使用管道模式协调打包步骤的执行。工作区在管道中创建，并且无论成功与否都在最后删除。
"""

import time
from typing import List, Optional

from ..config.loader import ConfigError, load_application_config
from ..config.schema import BuildRequest
from ..utils import format_size
from ..utils.logging import info, success, debug, error, LogStage
from .build_context import BuildContext, BuildError, ProgressCallback
from .workspace import WorkspaceManager
from .steps.build_step import BuildStep
from .steps.zpk_staging_step import ZpkStagingStep
from .steps.application_copy_step import ApplicationCopyStep
from .steps.module_selection_step import ModuleSelectionStep
from .steps.config_merge_step import ConfigMergeStep
from .steps.dependency_install_step import DependencyInstallStep
from .steps.archive_step import ArchiveStep


class BuildPipeline:
    """构建管道，负责协调打包步骤的执行"""

    def __init__(self, workspace_manager: Optional[WorkspaceManager] = None):
        self.workspace_manager = workspace_manager or WorkspaceManager()
        self._steps: List[BuildStep] = []

        self._init_default_steps()

    def _init_default_steps(self):
        """初始化默认的打包步骤"""
        self._steps = [
            ZpkStagingStep(),
            ApplicationCopyStep(),
            ModuleSelectionStep(),
            ConfigMergeStep(),
            DependencyInstallStep(),
            ArchiveStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加打包步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除打包步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有打包步骤"""
        return self._steps.copy()

    def get_step(self, step_name: str) -> Optional[BuildStep]:
        for step in self._steps:
            if step.name == step_name:
                return step
        return None

    def execute(
        self,
        request: BuildRequest,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildContext:
        """执行构建管道

        Args:
            request: 已校验的打包请求
            progress_callback: 进度回调函数

        Returns:
            BuildContext: 构建上下文，包含统计信息

        Raises:
            BuildError: 任一步骤失败
        """
        try:
            app_config = load_application_config(request.source_path)
        except ConfigError as e:
            error(f"无法读取应用描述文件: {e}", stage=LogStage.VALIDATE)
            raise BuildError(f"无法读取应用描述文件: {e}") from e

        context = BuildContext(
            request=request,
            app_config=app_config,
            progress_callback=progress_callback,
        )
        context.build_stats['start_time'] = time.time()

        info(f"开始打包: {request.source_path} -> {request.output_path}", stage=LogStage.INIT)
        debug(
            f"打包参数: format={request.archive_format.value} modules={len(request.modules)} "
            f"vendor={request.include_vendor} composer={request.use_composer} gitignore={request.use_gitignore}",
            stage=LogStage.INIT,
        )

        try:
            context.workspace = self.workspace_manager.create()
            context.staging_dir = context.workspace
            info(f"临时工作区: {context.workspace}", stage=LogStage.WORKSPACE)

            for step in self._steps:
                if not step.should_run(context):
                    debug(f"跳过步骤: {step.description}", stage=LogStage.INIT)
                    continue
                info(f"执行步骤: {step.description}", stage=LogStage.INIT)
                try:
                    step.execute(context)
                except BuildError:
                    raise
                except Exception as e:
                    raise BuildError(f"步骤 '{step.description}' 失败: {e}") from e

        except BuildError as e:
            context.build_stats['end_time'] = time.time()
            error(f"打包失败: {e}", stage=LogStage.DONE)
            raise

        finally:
            if context.workspace is not None:
                debug(f"删除临时工作区: {context.workspace}", stage=LogStage.CLEANUP)
                self.workspace_manager.destroy(context.workspace)

        context.build_stats['end_time'] = time.time()
        build_time = context.build_stats['end_time'] - context.build_stats['start_time']

        success(f"包文件 {request.output_path} 生成成功", stage=LogStage.DONE)
        info(f"打包时间: {build_time:.1f}秒")
        info(f"包大小: {format_size(context.build_stats.get('output_size', 0))}")

        return context

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        # 检查步骤的进度范围是否连续
        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
