import io
import sys

import pytest

from scriptcli import __main__ as cli_main


@pytest.fixture(autouse=True)
def plain_env(monkeypatch):
    for name in ("SCRIPTCLI_END_OF_SCRIPT", "SCRIPTCLI_EXIT", "SCRIPTCLI_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SCRIPTCLI_COLORS", "false")


def test_run_script_file_prints_output_and_result(tmp_path, capsys):
    script = tmp_path / "job.py"
    script.write_text("print('hi')\n21 * 2\n", encoding="utf-8")
    cli_main.main([str(script)])
    out = capsys.readouterr().out
    assert out == "hi\n42\n"


def test_run_script_file_error_exits_1(tmp_path, capsys):
    script = tmp_path / "bad.py"
    script.write_text("print('before')\n1 / 0\n", encoding="utf-8")
    with pytest.raises(SystemExit) as info:
        cli_main.main([str(script)])
    assert info.value.code == 1
    out, err = capsys.readouterr()
    assert out == "before\n"
    assert "ZeroDivisionError" in err


def test_missing_script_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as info:
        cli_main.main([str(tmp_path / "absent.py")])
    assert info.value.code == 1
    assert "file not found" in capsys.readouterr().err


def test_interactive_console(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("print('from console')\n;;\nexit\n"))
    cli_main.main([])
    out = capsys.readouterr().out
    assert "--- Python script CLI ---" in out
    assert "from console" in out
    assert out.rstrip().endswith("Bye!")


def test_interactive_console_eof(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("print(1)\n"))
    cli_main.main([])
    assert "Exiting." in capsys.readouterr().out


def test_config_file_sets_tokens(tmp_path, monkeypatch, capsys):
    config = tmp_path / "scriptcli.yaml"
    config.write_text("end_of_script: go\nexit: quit\n", encoding="utf-8")
    monkeypatch.setattr(sys, "stdin", io.StringIO("print('configured')\ngo\nquit\n"))
    cli_main.main(["--config", str(config)])
    out = capsys.readouterr().out
    assert "end of script - go" in out
    assert "configured" in out
    assert "Bye!" in out


@pytest.mark.parametrize("argv", [["--config"], ["--verbose"]])
def test_bad_arguments_exit_2(argv, capsys):
    with pytest.raises(SystemExit) as info:
        cli_main.main(argv)
    assert info.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_invalid_config_exits_2(tmp_path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("nonsense: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit) as info:
        cli_main.main(["--config", str(config)])
    assert info.value.code == 2
    assert "invalid configuration" in capsys.readouterr().err
