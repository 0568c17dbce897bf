# File: src/mcquery/exceptions.py
"""
Minecraft Query 客户端 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI/Bot）能按错误种类分支处理。
"""

from enum import IntEnum


class QueryError(Exception):
    """mcquery 所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 mcquery 抛出的已知错误。
    """

    pass


class ConfigError(QueryError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host)。
    2. 字段格式错误 (如端口非数字、超出 0-65535)。
    3. 地址中已带端口，却又单独指定了端口。
    """

    pass


class NetworkError(QueryError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. Socket 创建失败、端口绑定失败或 connect 失败。
    2. 发送 (send) 或 接收 (recv) 失败。
    3. DNS 解析失败。

    注意: Token 过期不会单独报错，只会表现为下一次请求的接收超时。
    """

    pass


class QueryTimeoutError(NetworkError):
    """接收超时。

    服务器在超时时间内没有回包。常见原因是服务器未开启 enable-query，
    或者 Token 已过期 (有效期约 30 秒)。
    """

    pass


class ProtocolError(QueryError):
    """协议交互错误 (逻辑级别)。

    所有载荷解析失败都属于此类，具体原因见 ParseError.kind。
    """

    pass


class StateError(QueryError):
    """状态错误。

    触发场景:
    1. 在客户端关闭 (close) 之后继续发起请求。
    """

    pass


class ParseErrorKind(IntEnum):
    """载荷解析失败的种类。"""

    INSUFFICIENT_DATA = 1  # 缺少必要的分段或键
    MALFORMED_VALUE = 2  # 数值字段含非数字字节，或端口字节不足
    STRUCTURAL = 3  # FullStat 找不到 KV 区与玩家区之间的分隔符

    @property
    def description(self) -> str:
        """获取错误种类对应的人类可读中文描述。

        Returns:
            str: 对应的中文错误提示。
        """
        _DESC_MAP = {
            1: "UDP 载荷数据不足",
            2: "字段值格式错误",
            3: "FullStat 载荷结构损坏",
        }
        return _DESC_MAP[self.value]


class ParseError(ProtocolError):
    """载荷解析失败。

    解析器在发现问题的位置立即抛出，不会返回部分解析的记录。
    """

    def __init__(self, kind: ParseErrorKind, detail: str = "") -> None:
        """初始化解析错误。

        Args:
            kind: 错误种类。
            detail: 附加说明 (如缺失的字段名)，会拼接到标准描述之后。
        """
        self.kind = kind
        self.detail = detail
        message = kind.description
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
