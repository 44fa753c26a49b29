"""
zfdeploy - ZF2 / Apigility 应用打包工具

Package a ZF2 or Apigility application as zip, tar, tar.gz, tgz or zpk.
"""

__version__ = "0.3.0"
__author__ = "zfdeploy developers"
__license__ = "BSD-3-Clause"

# 导出主要 API
from .config.schema import BuildRequest, ArchiveFormat
from .build.builder import Builder, BuildResult

__all__ = ["BuildRequest", "ArchiveFormat", "Builder", "BuildResult", "__version__"]
