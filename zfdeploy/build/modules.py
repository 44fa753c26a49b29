"""
模块选择

只打包指定的模块，并同步改写暂存应用中的 modules 列表。
"""

from pathlib import Path
from typing import List, Sequence

from ..config.loader import application_loader
from ..utils.logging import info, debug, warning, LogStage
from ..utils.paths import module_path, normalize_module_name
from .copier import TreeCopier


class ModuleSelector:
    """模块选择器"""

    def __init__(self, use_gitignore: bool = True):
        self.use_gitignore = use_gitignore
        self.copier = TreeCopier()

    def restrict(self, source_app: Path, staging_dir: Path, requested_modules: Sequence[str]) -> List[str]:
        """复制请求的模块并改写 modules 列表

        整个 module/ 目录必须已经在通用复制阶段被排除。

        Args:
            source_app: 源应用目录
            staging_dir: 暂存目录
            requested_modules: 请求的模块名；为空时不做任何处理

        Returns:
            List[str]: 从 modules 列表中移除的模块名
        """
        if not requested_modules:
            return []

        source_app = Path(source_app)
        staging_dir = Path(staging_dir)

        for module in requested_modules:
            source = module_path(source_app, module)
            target = module_path(staging_dir, module)
            count = self.copier.copy(source, target, use_gitignore=self.use_gitignore)
            debug(f"复制模块 {module}: {count} 个文件", stage=LogStage.MODULES)

        if application_loader.find(staging_dir) is None:
            warning("暂存目录中没有应用描述文件，跳过 modules 列表改写", stage=LogStage.MODULES)
            return []

        requested = {normalize_module_name(m) for m in requested_modules}

        def keep(name: str) -> bool:
            # 本地不存在目录的模块（如 vendor 提供的框架模块）保留
            normalized = normalize_module_name(name)
            if not normalized or normalized in requested:
                return True
            try:
                return not module_path(source_app, name).is_dir()
            except ValueError:
                return True

        removed = application_loader.rewrite_modules(staging_dir, keep)
        if removed:
            info(f"从 modules 列表移除: {', '.join(removed)}", stage=LogStage.MODULES)
        return removed
