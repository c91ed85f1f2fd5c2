import sys

import pytest
import structlog

from wxf import loads
from wxf.expr import Function, Symbol
from wxf_cli import compile_template, dump
from wxf_cli.main import CliManager

F_1_A = bytes.fromhex('38 3a 66 02 73 01 66 43 01 53 01 61')


@pytest.fixture
def restore_structlog():
    config = structlog.get_config()
    yield
    structlog.configure(**config)


def test_dump_tree(tmp_path, capsys):
    path = tmp_path / 'f.wxf'
    path.write_bytes(F_1_A)
    assert dump.main([str(path)]) == 0
    assert capsys.readouterr().out.splitlines() == ['Function f [2]', '  INT8 1', "  STRING 'a'"]


def test_dump_tokens(tmp_path, capsys):
    path = tmp_path / 'f.wxf'
    path.write_bytes(F_1_A)
    assert dump.main([str(path), '--tokens']) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 4
    assert lines[0].split() == ['2', 'Token(FUNCTION,', 'offset=2,', 'length=2)']


@pytest.mark.parametrize('data', [b'', b'8:f\x02s\x01fC\x01', b'8:\x00'])
def test_dump_error(tmp_path, data):
    path = tmp_path / 'bad.wxf'
    path.write_bytes(data)
    assert dump.main([str(path)]) == 1
    assert dump.main([str(path), '--tokens']) == (0 if data == b'8:f\x02s\x01fC\x01' else 1)


def test_compile(tmp_path):
    output = tmp_path / 'out.wxf'
    assert compile_template.main(['f[1, "a"]', '--output', str(output)]) == 0
    assert output.read_bytes() == F_1_A


def test_compile_with_args(tmp_path):
    output = tmp_path / 'out.wxf'
    argv = ['f[#x, #y]', '--arg', 'x=g[1]', '--arg', 'y={}', '--output', str(output)]
    assert compile_template.main(argv) == 0
    assert loads(output.read_bytes()) == Function(Symbol('f'), (Function(Symbol('g'), (1,)), []))


@pytest.mark.parametrize('argv', [
    ['f[#x]'],
    ['f[#x]', '--arg', 'x'],
    ['f[#x]', '--arg', '=1'],
    ['f[1'],
])
def test_compile_errors(tmp_path, argv):
    output = tmp_path / 'out.wxf'
    assert compile_template.main(argv + ['--output', str(output)]) == 1
    assert not output.exists()


def test_parse_assignment():
    assert compile_template.parse_assignment('name=f[a=b]') == ('name', 'f[a=b]')
    with pytest.raises(ValueError):
        compile_template.parse_assignment('name')


def test_manager_help(monkeypatch, capsys):
    monkeypatch.setattr(sys, 'argv', ['wxf-cli'])
    assert CliManager().execute_from_command_line() == 0
    out = capsys.readouterr().out
    assert 'dump' in out
    assert 'compile' in out


def test_manager_unknown_command(monkeypatch, capsys):
    monkeypatch.setattr(sys, 'argv', ['wxf-cli', 'frobnicate'])
    assert CliManager().execute_from_command_line() == -1
    assert 'Unknown command' in capsys.readouterr().out


def test_manager_runs_command(monkeypatch, tmp_path, capsys, restore_structlog):
    path = tmp_path / 'f.wxf'
    path.write_bytes(F_1_A)
    monkeypatch.setattr(sys, 'argv', ['wxf-cli', 'dump', str(path), '--disable-logs', '--debug'])
    assert CliManager().execute_from_command_line() == 0
    assert capsys.readouterr().out.startswith('Function f [2]')
