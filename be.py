import asyncio
import logging
import os
import sys
from pathlib import Path

from beavieeer.be_builtins import builtin_docs
from beavieeer.be_datatypes import Null
from beavieeer.be_host import Host
from beavieeer.be_printer import Printer
from beavieeer.be_runtime import ScriptRunner

PROMPT = ">> "
RECURSION_LIMIT = 10_000

HELP = """Available commands:
  :q                - Quit the REPL
  :info             - List available functions
  :info <function>  - Show documentation for a specific function
  :help             - Show this help message"""


# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)


def configure_logging():
    if os.environ.get("BE_DEBUG"):
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="[%(levelname)s] %(name)s: %(message)s",
        )


def describe_builtin(name: str) -> str:
    doc = builtin_docs().get(name)
    if doc is None:
        return f"No documentation found for '{name}'"
    return f"Function: {name}\n{doc['description']}\n{doc['signature']}"


async def run_script_file(file_path: str):
    """Run a Beavieeer script file non-interactively and exit with appropriate status."""
    p = Path(file_path)
    if p.suffix != ".be":
        print(f"Error: expected a .be file, got: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)

    runner = ScriptRunner(host=Host(output_func=print))
    printer = Printer()
    runner.source_dir = str(p.parent.resolve())
    result = runner.handle_script(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    if not isinstance(result.value, Null):
        print(printer.pformat(result.value))


async def main():
    """Run a script file when provided, otherwise start the interactive REPL."""
    configure_logging()
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if len(sys.argv) > 2:
        print("Usage: be [script.be]", file=sys.stderr)
        raise SystemExit(1)
    if len(sys.argv) == 2:
        await run_script_file(sys.argv[1])
        return

    print("Welcome to the Beavieeer REPL!")
    print("Type :q to quit, :info <function> to get function documentation")

    # Setup
    runner = ScriptRunner(host=Host(output_func=print))
    printer = Printer()
    runner.source_dir = str(Path.cwd())

    # REPL Loop
    while True:
        try:
            raw = await ainput(PROMPT)
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == ":q":
                print("Exiting REPL. Goodbye!")
                break
            if line == ":help":
                print(HELP)
                continue
            if line == ":info":
                print("Usage: :info <function_name>")
                print("Available functions:")
                print(", ".join(sorted(builtin_docs())))
                continue
            if line.startswith(":info "):
                print(describe_builtin(line[len(":info "):].strip()))
                continue

            result = runner.handle_script(line)

            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            if not isinstance(result.value, Null):
                print(printer.pformat(result.value))

        except EOFError:
            print("\nExiting.")
            break


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")


if __name__ == "__main__":
    run()
