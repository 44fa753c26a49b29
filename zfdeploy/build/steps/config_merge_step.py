"""
配置合并步骤模块

把 --configs 目录下的配置文件复制到 config/autoload/。
"""

import shutil
from pathlib import Path
from typing import List

from ...utils.logging import info, success, debug, error, LogStage
from ...utils.paths import ensure_directory
from zfdeploy.build.build_context import BuildContext, BuildError
from .build_step import BuildStep

CONFIG_PATTERNS = ("*.php", "*.yaml", "*.yml")
AUTOLOAD_DIR = Path("config") / "autoload"


def find_config_files(configs_dir: Path) -> List[Path]:
    """configs_dir 第一层中的配置文件，按文件名排序"""
    files = set()
    for pattern in CONFIG_PATTERNS:
        files.update(p for p in Path(configs_dir).glob(pattern) if p.is_file())
    return sorted(files, key=lambda p: p.name)


class ConfigMergeStep(BuildStep):
    """配置合并步骤"""

    def __init__(self):
        super().__init__("configs", "合并配置文件")

    def get_progress_range(self) -> tuple[int, int]:
        return (50, 55)

    def should_run(self, context: BuildContext) -> bool:
        return context.request.configs_dir is not None

    def execute(self, context: BuildContext) -> None:
        configs_dir = Path(context.request.configs_dir)
        target = Path(context.staging_dir) / AUTOLOAD_DIR
        info(f"合并配置文件: {configs_dir} -> {target}", stage=LogStage.CONFIGS)
        self.report_start(context, "复制配置文件...")

        files = find_config_files(configs_dir)
        try:
            ensure_directory(target)
            for path in files:
                # 同名文件直接覆盖
                shutil.copyfile(path, target / path.name)
                debug(f"复制配置: {path.name}", stage=LogStage.CONFIGS)
        except OSError as e:
            error(f"复制配置文件失败: {e}", stage=LogStage.CONFIGS)
            raise BuildError(f"复制配置文件失败: {e}") from e

        self.report_end(context, f"已合并 {len(files)} 个配置文件")
        success(f"已合并 {len(files)} 个配置文件", stage=LogStage.CONFIGS)
