"""通用工具模块"""

from .logging import (
    configure_logging,
    get_stage_logger,
    set_log_file,
    set_log_level,
    StageLogger,
    LogStage,
    OutputLevel,
)

from .paths import (
    ensure_directory,
    normalize_path,
    normalize_module_name,
    module_path,
    safe_path_join,
    get_asset_path,
    format_size,
)

from .xml_schema import (
    DEPLOYMENT_SCHEMA,
    get_schema_errors,
    validate_xml,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "get_stage_logger",
    "set_log_file",
    "set_log_level",
    "StageLogger",
    "LogStage",
    "OutputLevel",

    # 路径相关
    "ensure_directory",
    "normalize_path",
    "normalize_module_name",
    "module_path",
    "safe_path_join",
    "get_asset_path",
    "format_size",

    # XML 校验
    "DEPLOYMENT_SCHEMA",
    "get_schema_errors",
    "validate_xml",
]
