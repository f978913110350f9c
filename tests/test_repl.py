import importlib.util
import sys
from pathlib import Path
import uuid
import pytest


def _load_repl_module():
    """Dynamically load the top-level be.py (REPL) as a module with a unique name."""
    repl_path = Path(__file__).resolve().parents[1] / "be.py"
    mod_name = f"be_repl_for_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, str(repl_path))
    mod = importlib.util.module_from_spec(spec)
    sys.modules[mod_name] = mod
    assert spec.loader is not None
    spec.loader.exec_module(mod)
    return mod


@pytest.fixture
def repl(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["be"])
    monkeypatch.setattr(sys, "setrecursionlimit", lambda limit: None)
    return _load_repl_module()


def feed(monkeypatch, repl, *lines):
    it = iter(lines)

    async def fake_ainput(prompt: str) -> str:
        return next(it)
    monkeypatch.setattr(repl, "ainput", fake_ainput)


@pytest.mark.asyncio
async def test_repl_quit_immediately(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, ":q")

    await repl.main()
    out = capsys.readouterr().out
    assert "Welcome to the Beavieeer REPL!" in out
    assert "Type :q to quit, :info <function> to get function documentation" in out
    assert "Exiting REPL. Goodbye!" in out


@pytest.mark.asyncio
async def test_repl_prints_side_effects_and_values(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, 'print("hello from be")', "1 + 2", ":q")

    await repl.main()
    out, err = capsys.readouterr()
    assert "hello from be" in out
    assert "\n3\n" in out
    assert err == ""


@pytest.mark.asyncio
async def test_repl_keeps_bindings_between_lines(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, "let add = fun(a, b) { a + b };", "add(2, 3)", '"text"', ":q")

    await repl.main()
    out = capsys.readouterr().out
    assert "\n5\n" in out
    assert '"text"' in out


@pytest.mark.asyncio
async def test_repl_does_not_print_null(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, "let x = 1;", "   \n", ":q")

    await repl.main()
    out = capsys.readouterr().out
    assert "null" not in out


@pytest.mark.asyncio
async def test_repl_errors_print_to_stderr(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, '1 + "a"', "let = 2;", "5", ":q")

    await repl.main()
    out, err = capsys.readouterr()
    assert "Error: type mismatch: INTEGER + STRING" in err
    assert "SyntaxError: expected identifier after 'let', got '='" in err
    # The session keeps going after errors.
    assert "\n5\n" in out


@pytest.mark.asyncio
async def test_repl_info_commands(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, ":info", ":info map", ":info nothing", ":help", ":q")

    await repl.main()
    out = capsys.readouterr().out
    assert "Available functions:" in out
    assert "replaceString" in out
    assert "Function: map" in out
    assert "No documentation found for 'nothing'" in out
    assert ":info <function>  - Show documentation for a specific function" in out


@pytest.mark.asyncio
async def test_repl_eof_quits(repl, monkeypatch, capsys):
    async def fake_ainput(prompt: str) -> str:
        raise EOFError
    monkeypatch.setattr(repl, "ainput", fake_ainput)

    await repl.main()
    out = capsys.readouterr().out
    assert "Exiting." in out


@pytest.mark.asyncio
async def test_empty_read_means_end_of_input(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, "")

    await repl.main()
    assert "Exiting." in capsys.readouterr().out


# --- Script files ---

@pytest.mark.asyncio
async def test_run_script_file(repl, tmp_path, capsys):
    script = tmp_path / "hello.be"
    script.write_text('print("hi");\nlet xs = map([1, 2], fun(x) { x * 10 });\nxs\n', encoding="utf-8")

    await repl.run_script_file(str(script))
    out = capsys.readouterr().out
    assert out == "hi\n[10, 20]\n"


@pytest.mark.asyncio
async def test_script_reads_files_relative_to_itself(repl, tmp_path, monkeypatch, capsys):
    (tmp_path / "input.txt").write_text("content", encoding="utf-8")
    script = tmp_path / "reader.be"
    script.write_text('readFile("input.txt")', encoding="utf-8")
    monkeypatch.chdir(Path(tmp_path.anchor))

    await repl.run_script_file(str(script))
    assert capsys.readouterr().out == '"content"\n'


@pytest.mark.asyncio
async def test_script_error_exits_with_status_1(repl, tmp_path, capsys):
    script = tmp_path / "broken.be"
    script.write_text('print("before");\n1 / 0', encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        await repl.run_script_file(str(script))
    assert exc.value.code == 1
    out, err = capsys.readouterr()
    assert "before" in out
    assert "Error: division by zero" in err


@pytest.mark.asyncio
async def test_script_syntax_error_exits_without_running(repl, tmp_path, capsys):
    script = tmp_path / "syntax.be"
    script.write_text('print("never");\nlet = 1;', encoding="utf-8")

    with pytest.raises(SystemExit):
        await repl.run_script_file(str(script))
    out, err = capsys.readouterr()
    assert "never" not in out
    assert "SyntaxError:" in err


@pytest.mark.asyncio
async def test_script_must_have_be_extension(repl, tmp_path, capsys):
    script = tmp_path / "notes.txt"
    script.write_text("1", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        await repl.run_script_file(str(script))
    assert exc.value.code == 1
    assert "Error: expected a .be file, got:" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_missing_script_file(repl, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        await repl.run_script_file(str(tmp_path / "absent.be"))
    assert exc.value.code == 1
    assert "Error: file not found:" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_main_runs_script_from_argv(repl, tmp_path, monkeypatch, capsys):
    script = tmp_path / "args.be"
    script.write_text("40 + 2", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["be", str(script)])

    await repl.main()
    assert capsys.readouterr().out == "42\n"


@pytest.mark.asyncio
async def test_main_rejects_extra_arguments(repl, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["be", "a.be", "b.be"])

    with pytest.raises(SystemExit):
        await repl.main()
    assert "Usage: be [script.be]" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_repl_survives_deeply_nested_input(repl, monkeypatch, capsys):
    feed(monkeypatch, repl, "!" * 3000 + "true", "5", ":q")

    await repl.main()
    out, err = capsys.readouterr()
    assert "RecursionError" in err
    assert "\n5\n" in out
