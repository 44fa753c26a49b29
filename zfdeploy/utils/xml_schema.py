"""
XML Schema 校验

deployment.xml 使用 XSD 校验，底层由 lxml 完成。
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree

from .paths import get_asset_path

DEPLOYMENT_SCHEMA = get_asset_path("zpk", "schema.xsd")


@lru_cache(maxsize=None)
def _load_schema(schema_path: str) -> etree.XMLSchema:
    return etree.XMLSchema(etree.parse(schema_path))


def get_schema_errors(xml_path: Union[str, Path], schema_path: Optional[Union[str, Path]] = None) -> List[str]:
    """校验 XML 文件并返回错误列表

    Args:
        xml_path: 待校验的 XML 文件
        schema_path: XSD 文件，默认使用 deployment.xml 的 schema

    Returns:
        List[str]: 错误信息列表，空列表表示校验通过
    """
    xml_path = Path(xml_path)
    schema_path = Path(schema_path or DEPLOYMENT_SCHEMA)

    if not xml_path.is_file():
        return [f"XML 文件不存在: {xml_path}"]
    if not schema_path.is_file():
        return [f"XML schema 文件不存在: {schema_path}"]

    try:
        document = etree.parse(str(xml_path))
    except etree.XMLSyntaxError as e:
        return [f"XML 语法错误: {e}"]

    schema = _load_schema(str(schema_path.resolve()))
    if schema.validate(document):
        return []

    return [f"第 {entry.line} 行: {entry.message}" for entry in schema.error_log]


def validate_xml(xml_path: Union[str, Path], schema_path: Optional[Union[str, Path]] = None) -> bool:
    """XML 文件是否通过 schema 校验"""
    return not get_schema_errors(xml_path, schema_path)
