# tests/test_main.py
import pytest

from mcquery.main import format_stat, main
from mcquery.protocols.responses import FullStat


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """在空目录中运行，且不带任何 MCQUERY_* 环境变量。"""
    monkeypatch.chdir(tmp_path)
    for suffix in ("HOST", "PORT", "BIND_IP", "BIND_PORT", "TIMEOUT"):
        # 先 setenv 再 delenv，测试结束后 .env 加载的变量也会被还原
        monkeypatch.setenv(f"MCQUERY_{suffix}", "")
        monkeypatch.delenv(f"MCQUERY_{suffix}")
    return tmp_path


def test_main_full_stat(fake_server, clean_env, capsys):
    assert main([fake_server.address]) == 0
    out = capsys.readouterr().out
    assert "hostname: A Minecraft Server" in out
    assert "player_list: AldanTanneo, Dinnerbone" in out


def test_main_basic(fake_server, clean_env, capsys):
    assert main(["--basic", fake_server.address]) == 0
    out = capsys.readouterr().out
    assert "motd: A Minecraft Server" in out
    assert "player_list" not in out
    assert [len(r) for r in fake_server.requests] == [7, 11]


@pytest.mark.parametrize("mode", ["--async", "--threaded"])
def test_main_async_modes(fake_server, clean_env, capsys, mode):
    assert main([mode, fake_server.address]) == 0
    assert "version: 1.7.10" in capsys.readouterr().out


def test_main_reads_dotenv(fake_server, clean_env, capsys):
    (clean_env / ".env").write_text(
        f"MCQUERY_HOST=127.0.0.1\nMCQUERY_PORT={fake_server.port}\n"
        "MCQUERY_BIND_IP=127.0.0.1\n",
        encoding="utf-8",
    )
    assert main([]) == 0
    assert "game_id: MINECRAFT" in capsys.readouterr().out


def test_main_timeout(fake_server, clean_env, capsys):
    fake_server.silent = True
    assert main(["--timeout", "0.2", fake_server.address]) == 1
    assert "查询失败" in capsys.readouterr().err


def test_main_invalid_port(clean_env, capsys):
    assert main(["127.0.0.1:notaport"]) == 2
    assert "配置错误" in capsys.readouterr().err


@pytest.mark.parametrize("timeout", ["-1", "0"])
def test_main_invalid_timeout(fake_server, clean_env, capsys, timeout):
    assert main(["--timeout", timeout, fake_server.address]) == 2
    assert "超时必须为正数" in capsys.readouterr().err
    assert fake_server.requests == []


def test_main_missing_address(clean_env, capsys):
    assert main([]) == 2
    assert "MCQUERY_" in capsys.readouterr().err


def test_format_stat_empty_player_list():
    stat = FullStat(
        hostname="h",
        gametype="SMP",
        game_id="MINECRAFT",
        version="1.20",
        plugins="",
        map="world",
        numplayers=0,
        maxplayers=10,
        hostport=25565,
        hostip="0.0.0.0",
    )
    assert "player_list: -" in format_stat(stat)
