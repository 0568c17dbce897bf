# File: src/mcquery/utils.py
"""
Minecraft Query 客户端 - 通用字节工具箱

本模块汇集了各个响应解析器共用的底层解码函数。
"""

from collections.abc import Iterable, Iterator
from typing import TypeVar

from .exceptions import ParseError, ParseErrorKind

T = TypeVar("T")


def decimal_from_bytes(data: bytes, max_value: int | None = None) -> int:
    """将十进制 ASCII 字节串解析为无符号整数 (严格模式)。

    算法逻辑:
    1. 初始值 acc = 0
    2. 从左到右逐字节累加: acc = acc * 10 + digit
    3. 遇到任何非 '0'..'9' 的字节立即失败。

    空输入返回 0。

    Args:
        data: 十进制数字字节串。
        max_value: 可选的上限 (如 0xFFFF)，超出则视为格式错误。

    Returns:
        int: 解析结果。

    Raises:
        ParseError: 出现非数字字节或数值越界 (MALFORMED_VALUE)。
    """
    acc = 0
    for b in data:
        if not 0x30 <= b <= 0x39:
            raise ParseError(
                ParseErrorKind.MALFORMED_VALUE,
                f"读取到非数字字节 0x{b:02x}，无法解析十进制无符号整数",
            )
        acc = acc * 10 + (b - 0x30)

    if max_value is not None and acc > max_value:
        raise ParseError(
            ParseErrorKind.MALFORMED_VALUE, f"数值 {acc} 超出上限 {max_value}"
        )
    return acc


def latin1_to_string(data: bytes) -> str:
    """按 Latin-1 将字节逐个映射为同序号的 Unicode 码点。

    服务器下发的文本是单字节编码，不能按 UTF-8 解码。
    """
    return data.decode("latin-1")


def split_at_subslice(data: bytes, pattern: bytes) -> tuple[bytes, bytes] | None:
    """在第一次出现 pattern 的位置切分字节串。

    返回的两段都不包含 pattern 本身。

    Args:
        data: 待切分的字节串。
        pattern: 分隔模式。

    Returns:
        tuple[bytes, bytes] | None: (之前, 之后)；找不到 pattern 时返回 None。
    """
    if len(pattern) > len(data):
        return None

    index = data.find(pattern)
    if index < 0:
        return None
    return data[:index], data[index + len(pattern) :]


def pairs(iterable: Iterable[T]) -> Iterator[tuple[T, T]]:
    """将迭代器两两配对。元素个数为奇数时，最后一个元素被丢弃。"""
    it = iter(iterable)
    return zip(it, it)
