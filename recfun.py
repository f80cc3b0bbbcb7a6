import argparse
import asyncio
import sys
from pathlib import Path

from recfun.recfun_config import configure_logging
from recfun.recfun_printer import Printer
from recfun.recfun_runtime import ScriptRunner
from recfun.recfun_serialize import serialize

# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recfun",
        description="Define and evaluate mu-recursive functions.",
    )
    parser.add_argument("file", nargs="?", help="definitions script to load")
    parser.add_argument("-q", "--query", action="append", default=[],
                        help="query to evaluate, e.g. 'add 2 3' (repeatable)")
    parser.add_argument("--dump", choices=["json", "yaml"],
                        help="print the loaded functions in the given format")
    return parser

def load_file(runner: ScriptRunner, file_path: str) -> bool:
    """Load a definitions file into the runner; report failures on stderr."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return False
    try:
        result = runner.handle_definitions(source)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return False
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        return False
    return True

def run_queries(runner: ScriptRunner, queries, printer: Printer) -> bool:
    ok = True
    for line in queries:
        try:
            result = runner.handle_query(line)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            ok = False
            continue
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            ok = False
            continue
        print(printer.pformat_result(result.value))
    return ok

async def repl(runner: ScriptRunner, printer: Printer):
    print("recfun REPL v0.1")
    print("Enter 'name = expression;' to define, 'name args...' to query, 'list' to show definitions.")
    print("Type 'exit' or press Ctrl+D to quit.")

    while True:
        try:
            raw = await ainput(">> ")
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break
            if line == "list":
                if runner.functions:
                    print(printer.pformat_table(runner.functions))
                continue

            if "=" in line:
                result = runner.handle_definitions(line)
                if result.status == 'error':
                    print(result.format_error(), file=sys.stderr)
                    continue
                for name in result.value:
                    print(f"Defined {name}")
                continue

            result = runner.handle_query(line)
            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue
            print(printer.pformat_result(result.value))

        except EOFError:
            print("\nExiting.")
            break
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)

async def main(argv=None):
    """Run queries against a definitions file, or start the interactive REPL."""
    args = build_arg_parser().parse_args(argv)
    configure_logging()

    runner = ScriptRunner()
    printer = Printer()

    if args.file and not load_file(runner, args.file):
        raise SystemExit(1)

    if args.dump:
        print(serialize(runner.functions, fmt=args.dump))

    if args.query:
        if not run_queries(runner, args.query, printer):
            raise SystemExit(1)
        return

    if args.dump:
        return

    await repl(runner, printer)

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")
