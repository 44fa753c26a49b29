"""构建服务模块

提供应用打包的核心功能。
"""

from .builder import Builder, BuildResult
from .build_pipeline import BuildPipeline
from .build_context import (
    BuildContext,
    BuildError,
    SchemaValidationError,
    TempDirExhaustedError,
    InstallFailedError,
    UnknownFormatError,
    ArchiveIOError,
)
from .exclusions import ExclusionSet, compute_exclusions, read_gitignore
from .copier import TreeCopier, copy_tree
from .workspace import WorkspaceManager
from .zpk import ZpkStager, stage_zpk
from .composer import DependencyInstaller, InstallResult, remove_vendor_tests
from .modules import ModuleSelector
from .archiver import (
    Archiver,
    ArchiveWriter,
    ArchiveWriterFactory,
    ZipArchiveWriter,
    TarArchiveWriter,
    GzipTarArchiveWriter,
)

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "BuildPipeline",
    "BuildContext",

    # 异常类
    "BuildError",
    "SchemaValidationError",
    "TempDirExhaustedError",
    "InstallFailedError",
    "UnknownFormatError",
    "ArchiveIOError",

    # 文件复制
    "ExclusionSet",
    "compute_exclusions",
    "read_gitignore",
    "TreeCopier",
    "copy_tree",

    # 工作区与 zpk
    "WorkspaceManager",
    "ZpkStager",
    "stage_zpk",

    # 依赖与模块
    "DependencyInstaller",
    "InstallResult",
    "remove_vendor_tests",
    "ModuleSelector",

    # 打包
    "Archiver",
    "ArchiveWriter",
    "ArchiveWriterFactory",
    "ZipArchiveWriter",
    "TarArchiveWriter",
    "GzipTarArchiveWriter",
]
