"""
依赖安装步骤模块

在暂存目录中执行 composer install，随后清理依赖中的测试目录。
"""

from ...utils.logging import info, success, error, LogStage
from zfdeploy.build.build_context import BuildContext, BuildError
from zfdeploy.build.composer import DependencyInstaller, remove_vendor_tests
from .build_step import BuildStep


class DependencyInstallStep(BuildStep):
    """依赖安装步骤"""

    def __init__(self, installer: DependencyInstaller = None):
        super().__init__("composer", "安装依赖")
        self.installer = installer or DependencyInstaller()

    def get_progress_range(self) -> tuple[int, int]:
        return (55, 80)

    def should_run(self, context: BuildContext) -> bool:
        request = context.request
        return not request.include_vendor and request.use_composer

    def execute(self, context: BuildContext) -> None:
        info("执行 composer install", stage=LogStage.COMPOSER)
        self.report_start(context, "composer install...")

        try:
            context.install_result = self.installer.install(context.staging_dir)
            if context.request.strip_vendor_tests:
                removed = remove_vendor_tests(context.staging_dir)
                context.build_stats['removed_test_dirs'] = len(removed)
        except BuildError as e:
            error(f"依赖安装失败: {e}", stage=LogStage.COMPOSER)
            raise
        except OSError as e:
            error(f"依赖安装失败: {e}", stage=LogStage.COMPOSER)
            raise BuildError(f"依赖安装失败: {e}") from e

        self.report_end(context, "依赖安装完成")
        success("依赖安装完成", stage=LogStage.COMPOSER)
