"""
zfdeploy CLI 主入口

提供命令行接口，支持 build/validate/info 命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..utils import configure_logging
from .commands import build, validate


# 创建主应用
app = typer.Typer(
    name="zfdeploy",
    help="zfdeploy - 把 ZF2 / Apigility 应用打包为 zip、tar、tar.gz、tgz 或 zpk",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"zfdeploy v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level="DEBUG" if verbose else "INFO")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """zfdeploy - ZF2 / Apigility 应用打包工具

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="生成应用包文件")(build.build_command)
app.command("validate", help="验证应用目录和 deployment.xml")(validate.validate_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    from ..build.archiver import ArchiveWriterFactory

    console.print("[bold]zfdeploy 系统信息[/bold]")
    console.print()

    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")

    table.add_row("zfdeploy", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")

    console.print(table)
    console.print()

    format_table = Table(title="支持的打包格式")
    format_table.add_column("格式", style="cyan")
    format_table.add_column("后缀", style="green")

    for fmt in ArchiveWriterFactory.get_available_formats():
        format_table.add_row(fmt.value, fmt.suffix)

    console.print(format_table)


if __name__ == "__main__":
    app()
