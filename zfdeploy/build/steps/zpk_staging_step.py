"""
ZPK 预处理步骤模块

仅对 zpk 格式生效：搭建 deployment.xml、scripts/、logo 和 data/ 目录。
"""

from ...config.schema import ArchiveFormat
from ...utils.logging import info, success, error, LogStage
from zfdeploy.build.build_context import BuildContext, BuildError
from zfdeploy.build.zpk import ZpkStager
from .build_step import BuildStep


class ZpkStagingStep(BuildStep):
    """ZPK 预处理步骤"""

    def __init__(self):
        super().__init__("zpk", "准备 ZPK 结构")
        self.stager = ZpkStager()

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 10)

    def should_run(self, context: BuildContext) -> bool:
        return context.request.archive_format == ArchiveFormat.ZPK

    def execute(self, context: BuildContext) -> None:
        """搭建 zpk 目录结构，把暂存目录切换到 data/"""
        request = context.request
        info(f"准备 ZPK 结构 - 包名: {request.package_name}, 版本: {request.app_version}", stage=LogStage.ZPK)
        self.report_start(context, "生成 deployment.xml...")

        try:
            context.staging_dir = self.stager.stage(
                context.workspace,
                request.package_name,
                request.app_version,
                request.deployment_xml,
                request.zpk_data_dir,
                context.app_config,
            )
        except BuildError as e:
            error(f"ZPK 预处理失败: {e}", stage=LogStage.ZPK)
            raise
        except OSError as e:
            error(f"ZPK 预处理失败: {e}", stage=LogStage.ZPK)
            raise BuildError(f"ZPK 预处理失败: {e}") from e

        self.report_end(context, "ZPK 结构准备完成")
        success("ZPK 结构准备完成", stage=LogStage.ZPK)
