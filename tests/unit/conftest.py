"""
单元测试共享 fixture

sample_app 构造一个最小的 ZF2 应用目录：
    .gitignore                    排除 config/autoload/local.php
    composer.json / composer.lock
    config/application.config.yaml
    config/autoload/global.php
    config/autoload/local.php     (被 .gitignore 排除)
    module/Application/...
    module/Test/...
    public/index.php
    vendor/zf/zfcbase/...
    .git/HEAD
"""

from pathlib import Path

import pytest

from zfdeploy.utils import logging as zf_logging


APPLICATION_CONFIG = """\
# 模块按加载顺序排列
modules:
  - ZfcBase
  - ZfcUser
  - Application
  - Test
module_listener_options:
  config_glob_paths:
    - config/autoload/{,*.}{global,local}.php
"""

VALID_DEPLOYMENT_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<package version="2.0" xmlns="http://www.zend.com/server/deployment-descriptor/1.0">
    <type>application</type>
    <name>custom</name>
    <version>
        <release>9.9.9</release>
    </version>
    <appdir>data</appdir>
</package>
"""

INVALID_DEPLOYMENT_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<package version="2.0" xmlns="http://www.zend.com/server/deployment-descriptor/1.0">
    <type>application</type>
</package>
"""


def write_file(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def sample_app(tmp_path) -> Path:
    """最小 ZF2 应用目录"""
    app = tmp_path / "app"
    write_file(app / ".gitignore", "# 本地配置\nconfig/autoload/local.php\n\n")
    write_file(app / "composer.json", '{"require": {"zendframework/zendframework": "2.*"}}')
    write_file(app / "composer.lock", "{}")
    write_file(app / "config" / "application.config.yaml", APPLICATION_CONFIG)
    write_file(app / "config" / "autoload" / "global.php", "<?php return array();")
    write_file(app / "config" / "autoload" / "local.php", "<?php return array('secret' => 1);")
    write_file(app / "module" / "Application" / "Module.php", "<?php namespace Application;")
    write_file(app / "module" / "Application" / "view" / "index.phtml", "<h1>hi</h1>")
    write_file(app / "module" / "Test" / "Module.php", "<?php namespace Test;")
    write_file(app / "public" / "index.php", "<?php")
    write_file(app / "vendor" / "zf" / "zfcbase" / "Module.php", "<?php")
    write_file(app / ".git" / "HEAD", "ref: refs/heads/master")
    return app


@pytest.fixture
def valid_deployment_xml(tmp_path) -> Path:
    return write_file(tmp_path / "xml" / "deployment.xml", VALID_DEPLOYMENT_XML)


@pytest.fixture
def invalid_deployment_xml(tmp_path) -> Path:
    return write_file(tmp_path / "bad" / "deployment.xml", INVALID_DEPLOYMENT_XML)


@pytest.fixture
def out_dir(tmp_path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def reset_logger():
    """每个测试后关闭全局输出门面，避免日志文件句柄跨测试残留"""
    yield
    zf_logging.close_logger()
