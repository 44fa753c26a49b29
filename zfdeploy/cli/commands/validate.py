"""
Validate 命令实现

只做打包前的校验：应用描述文件以及可选的 deployment.xml，不生成任何文件。
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ...config import validate_application
from ...utils.xml_schema import get_schema_errors


console = Console()


def _collect_errors(target: Path, deployment_xml: Optional[Path]) -> List[Dict[str, Any]]:
    errors = [dict(e, file="application") for e in validate_application(target)]
    if deployment_xml is not None:
        for message in get_schema_errors(deployment_xml):
            errors.append({'loc': [], 'msg': message, 'type': 'schema_error', 'file': str(deployment_xml)})
    return errors


def validate_command(
    target: str = typer.Option(".", "--target", help="应用根目录（默认当前目录）"),
    deployment_xml: Optional[str] = typer.Option(None, "--deploymentxml", help="同时校验的 deployment.xml"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式的错误信息"),
) -> None:
    """验证应用目录和 deployment.xml

    示例:
        zfdeploy validate --target ./myapp
        zfdeploy validate --deploymentxml deployment.xml --json
    """
    target_path = Path(target)
    xml_path = Path(deployment_xml) if deployment_xml else None

    if not json_output:
        console.print(f"正在验证应用: [cyan]{target_path}[/cyan]")

    errors = _collect_errors(target_path, xml_path)

    if json_output:
        data = {
            "target": str(target_path),
            "deployment_xml": str(xml_path) if xml_path else None,
            "errors": errors,
            "error_count": len(errors),
        }
        console.print_json(json.dumps(data, ensure_ascii=False))
        if errors:
            raise typer.Exit(1)
        return

    if not errors:
        console.print("[green]✓ 验证通过[/green]")
        return

    console.print(f"[red]验证失败 ({len(errors)} 个错误):[/red]")
    console.print()

    table = Table(title="验证错误")
    table.add_column("文件", style="cyan", no_wrap=True)
    table.add_column("位置", style="cyan", no_wrap=True)
    table.add_column("错误信息", style="red")

    for error in errors:
        location = " -> ".join(str(item) for item in error.get('loc', []))
        table.add_row(error.get('file', '-'), location or "根级别", error.get('msg', '未知错误'))

    console.print(table)
    raise typer.Exit(1)
