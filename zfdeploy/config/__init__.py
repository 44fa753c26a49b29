"""配置和 Schema 模块

提供打包请求的校验，以及应用描述文件（YAML）的加载与改写。
"""

from .schema import (
    APIGILITY_MODULE,
    APPLICATION_CONFIG_CANDIDATES,
    ApplicationConfig,
    ArchiveFormat,
    BuildRequest,
    default_app_version,
)
from .loader import (
    ApplicationConfigLoader,
    ConfigError,
    ConfigValidationError,
    application_loader,
    create_build_request,
    find_application_config,
    load_application_config,
    validate_application,
)

__all__ = [
    # 模型
    "ApplicationConfig",
    "ArchiveFormat",
    "BuildRequest",
    "APIGILITY_MODULE",
    "APPLICATION_CONFIG_CANDIDATES",
    "default_app_version",

    # 加载器
    "ApplicationConfigLoader",
    "application_loader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "create_build_request",
    "find_application_config",
    "load_application_config",
    "validate_application",
]
