"""
Composer 依赖安装

在暂存目录中执行 composer install。可执行文件的查找顺序：
    1. PATH 中的 composer 命令
    2. 暂存目录中已有的 composer.phar（先 self-update）
    3. 从 getcomposer.org 下载 composer.phar（用完即删）
"""

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import httpx

from ..utils.logging import get_stage_logger, LogStage
from .build_context import InstallFailedError

COMPOSER_COMMAND = "composer"
COMPOSER_PHAR = "composer.phar"
COMPOSER_DOWNLOAD_URL = "https://getcomposer.org/composer.phar"
INSTALL_ARGS = ["install", "--no-dev", "--prefer-dist", "--optimize-autoloader"]

# composer install 之后要删除的测试目录 vendor/<vendor>/<package>/<name>
VENDOR_TEST_DIRS = ("test", "tests")

logger = get_stage_logger(LogStage.COMPOSER)


@dataclass
class InstallResult:
    """composer install 的执行结果"""
    command: List[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


class DependencyInstaller:
    """Composer 依赖安装器"""

    DOWNLOAD_TIMEOUT = 60

    def __init__(self, timeout: Optional[float] = None, download_url: str = COMPOSER_DOWNLOAD_URL):
        # timeout 为 None 时一直等待 composer 结束
        self.timeout = timeout
        self.download_url = download_url
        self.downloaded: Optional[Path] = None

    def resolve_executable(self, workspace: Path) -> List[str]:
        """确定 composer 的调用方式"""
        composer = shutil.which(COMPOSER_COMMAND)
        if composer:
            logger.debug(f"使用 PATH 中的 composer: {composer}")
            return [composer]

        phar = workspace / COMPOSER_PHAR
        php = shutil.which("php") or "php"
        if phar.is_file():
            logger.info("更新已有的 composer.phar")
            update = self._run([php, str(phar), "self-update"], workspace)
            if not update.success:
                logger.warning(f"composer.phar self-update 失败，继续使用当前版本: {update.output}")
            return [php, str(phar)]

        self._download(phar)
        self.downloaded = phar
        return [php, str(phar)]

    def install(self, workspace: Path) -> InstallResult:
        """执行 composer install

        Raises:
            InstallFailedError: 下载失败或 composer 退出码非 0
        """
        workspace = Path(workspace)
        try:
            command = self.resolve_executable(workspace) + INSTALL_ARGS
            logger.info(f"执行: {' '.join(command)}")
            result = self._run(command, workspace)
        finally:
            self._cleanup_download()

        if not result.success:
            raise InstallFailedError(
                f"composer install 执行失败 (退出码 {result.exit_code})",
                output=result.output,
                exit_code=result.exit_code,
            )

        logger.success("composer install 完成")
        return result

    def _run(self, command: List[str], workspace: Path) -> InstallResult:
        # 通过 cwd 指定工作目录，不改变当前进程的工作目录
        try:
            completed = subprocess.run(
                command,
                cwd=str(workspace),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise InstallFailedError(f"无法执行 {command[0]}: {e}") from e

        return InstallResult(
            command=command,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def _download(self, target: Path) -> None:
        logger.info(f"下载 composer.phar: {self.download_url}")
        try:
            with httpx.Client(timeout=self.DOWNLOAD_TIMEOUT, follow_redirects=True) as client:
                response = client.get(self.download_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise InstallFailedError(f"下载 composer.phar 失败: {e}") from e

        target.write_bytes(response.content)

    def _cleanup_download(self) -> None:
        if self.downloaded is None:
            return
        try:
            self.downloaded.unlink()
            logger.debug(f"删除下载的 {self.downloaded}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"无法删除 {self.downloaded}: {e}")
        self.downloaded = None


def remove_vendor_tests(staging_dir: Path) -> List[Path]:
    """删除 vendor/*/*/test 与 vendor/*/*/tests 目录

    Returns:
        List[Path]: 被删除的目录
    """
    vendor = Path(staging_dir) / "vendor"
    removed = []
    if not vendor.is_dir():
        return removed

    for name in VENDOR_TEST_DIRS:
        for path in sorted(vendor.glob(f"*/*/{name}")):
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
                removed.append(path)

    if removed:
        logger.info(f"删除依赖中的测试目录: {len(removed)} 个")
    return removed
