"""
Build 命令实现

生成应用包文件的核心命令。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...config import create_build_request, ConfigValidationError
from ...utils import format_size
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()

SWITCH_VALUES = ("on", "off")


def switch_callback(value: str) -> str:
    """校验 on/off 开关参数"""
    value = value.strip().lower()
    if value not in SWITCH_VALUES:
        raise typer.BadParameter(f"只能是 \"on\" 或 \"off\"，而不是 \"{value}\"")
    return value


def build_command(
    package: str = typer.Argument(..., help="包文件名，后缀决定格式: .zip .tar .tar.gz .tgz .zpk"),
    target: str = typer.Option(".", "--target", help="应用根目录（默认当前目录）"),
    modules: Optional[str] = typer.Option(None, "--modules", help="只打包这些模块，逗号分隔"),
    vendor: bool = typer.Option(False, "--vendor", "-e", help="包含 vendor 目录（默认不包含）"),
    composer: str = typer.Option("on", "--composer", callback=switch_callback, help="是否执行 composer install: on 或 off"),
    gitignore: str = typer.Option("on", "--gitignore", callback=switch_callback, help="是否按 .gitignore 排除文件: on 或 off"),
    configs: Optional[str] = typer.Option(None, "--configs", help="额外配置文件目录，复制到 config/autoload"),
    deployment_xml: Optional[str] = typer.Option(None, "--deploymentxml", help="自定义 deployment.xml（仅 zpk）"),
    zpk_data: Optional[str] = typer.Option(None, "--zpkdata", help="zpk 资源目录，包含 deployment.xml、logo、scripts（仅 zpk）"),
    app_version: Optional[str] = typer.Option(None, "--version", help="应用版本号（仅 zpk，默认当前时间）"),
    keep_vendor_tests: bool = typer.Option(False, "--keep-vendor-tests", help="保留依赖中的 test/tests 目录"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """生成应用包文件

    示例:
        zfdeploy build app.zip
        zfdeploy build app.zpk --target ./myapp --version 1.0.0
        zfdeploy build app.tgz --modules Application,Api --composer off
    """
    from ...build.builder import Builder

    # 在任何输出前设置日志
    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        request = create_build_request(
            source_path=Path(target),
            output_path=Path(package),
            modules=modules,
            include_vendor=vendor,
            use_composer=composer == "on",
            use_gitignore=gitignore == "on",
            configs_dir=Path(configs) if configs else None,
            deployment_xml=Path(deployment_xml) if deployment_xml else None,
            zpk_data_dir=Path(zpk_data) if zpk_data else None,
            app_version=app_version,
            strip_vendor_tests=not keep_vendor_tests,
        )
    except ConfigValidationError as e:
        console.print("[red]参数验证失败:[/red]")
        console.print(e.format_errors(), markup=False, soft_wrap=True)
        raise typer.Exit(1)

    console.print(f"[cyan]开始打包[/cyan]: {request.source_path} -> {request.output_path}")
    if verbose:
        console.print("[dim]已启用详细模式 -- 将输出调试级日志[/dim]")

    def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
        """进度回调函数，显示进度"""
        if total > 0 and verbose:
            percentage = (current / total) * 100
            if message:
                console.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)")
            else:
                console.print(f"[blue]{stage}[/blue]: {percentage:.0f}%")

    try:
        result = Builder().build(request, progress_callback=progress_callback)
    except Exception as e:
        console.print(f"[red]✗ 打包过程中发生意外错误[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    if not result.success:
        console.print(f"[red]✗ 打包失败[/red]: {escape(str(result.error))}", soft_wrap=True)
        if result.details:
            console.print(result.details, markup=False, soft_wrap=True)
        if log_file:
            console.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓ 包文件 {result.output_path} 生成成功[/green]")
    if result.file_count is not None:
        console.print(f"[blue]文件数[/blue]: {result.file_count}")
    if result.output_size is not None:
        console.print(f"[blue]文件大小[/blue]: {format_size(result.output_size)}")
    if result.build_time is not None:
        console.print(f"[blue]打包时间[/blue]: {result.build_time:.1f} 秒")
