# src/mcquery/main.py
"""
mcquery 命令行入口。

用法:
    mcquery play.example.com:25565
    mcquery --basic --timeout 2 play.example.com
    MCQUERY_HOST=play.example.com mcquery

未给出地址时，从环境变量 (MCQUERY_*) 读取配置；
当前目录下的 .env 文件会先被加载。
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .clients import aio, blocking, threaded
from .config import QueryConfig, load_config_from_env, parse_address
from .exceptions import ConfigError, QueryError
from .protocols.responses import BasicStat, FullStat

logger = logging.getLogger("mcquery.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcquery", description="Minecraft 服务器 UDP Query 查询工具"
    )
    parser.add_argument("address", nargs="?", help="服务器地址 host[:port]")
    parser.add_argument("--basic", action="store_true", help="只查询基础状态")
    parser.add_argument("--timeout", type=float, default=None, help="接收超时 (秒)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--async", dest="mode", action="store_const", const="aio")
    mode.add_argument(
        "--threaded", dest="mode", action="store_const", const="threaded"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def load_cli_config(args: argparse.Namespace) -> QueryConfig:
    """根据命令行参数与环境变量生成配置。命令行参数优先。"""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        logger.debug(f"已加载配置文件: {env_path}")

    if args.address:
        host, port = parse_address(args.address)
        config = QueryConfig(host=host, port=port)
    else:
        config = load_config_from_env()

    if args.timeout is not None:
        config = replace(config, timeout=args.timeout)
    return config


def _run_blocking(config: QueryConfig, basic: bool) -> BasicStat | FullStat:
    with blocking.QueryClient(config) as client:
        token = client.handshake()
        return client.basic_stat(token) if basic else client.full_stat(token)


async def _run_async(
    config: QueryConfig, basic: bool, mode: str
) -> BasicStat | FullStat:
    client_cls = aio.QueryClient if mode == "aio" else threaded.QueryClient
    async with client_cls(config) as client:
        token = await client.handshake()
        if basic:
            return await client.basic_stat(token)
        return await client.full_stat(token)


def format_stat(stat: BasicStat | FullStat) -> str:
    """将状态记录格式化为多行文本。"""
    lines = []
    for name, value in vars(stat).items():
        if name == "player_list":
            value = ", ".join(value) if value else "-"
        lines.append(f"{name:>11}: {value}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """程序主入口点。"""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_cli_config(args)
        logger.info(f"查询 {config.host}:{config.port} (timeout={config.timeout}s)")

        if args.mode:
            stat = asyncio.run(_run_async(config, args.basic, args.mode))
        else:
            stat = _run_blocking(config, args.basic)

    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        print(f"配置错误: {ce}", file=sys.stderr)
        return 2
    except QueryError as e:
        logger.error(f"查询失败: {e}")
        print(f"查询失败: {e}", file=sys.stderr)
        return 1

    print(format_stat(stat))
    return 0


if __name__ == "__main__":
    sys.exit(main())
