"""CLI entry point for the Petrel interpreter.

Usage:
    python -m petrel [-v|-vv] [--parser descent|grammar] [--check] [program_file]
    python -m petrel [-v...] --emit-ast <program_file>
    python -m petrel [-v...] --ast <ast_json_file>

Options:
  -v            Increase logging verbosity (can be repeated)
  --parser      Front-end used to parse source files (default: descent)
  --check       Stop after semantic analysis
  --emit-ast    Parse the given file and emit an AST JSON file
  --ast         Analyze and execute a previously emitted AST JSON file

Without a program file the built-in sample program runs. With -vv, debug
records are written to `debug.txt` in the current directory.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import ParseError, PetrelError
from .frontend import FRONT_ENDS, parse
from .interpreter import Interpreter
from .semantic import analyze


logger = logging.getLogger(__name__)


SAMPLE_PROGRAM = """
var number: int;
print("Enter a number:");
input(number);
print("You entered:");
print(number);

var x: int = number;
var y: int = 20;
var z: int;
z = x + y * 2;

print(z);

if (z > 30) {
    print("z is greater than 30");
} else {
    print("z is less than or equal to 30");
}

var count: int = 0;
while (count < 3) {
    print(count);
    count = count + 1;
}
"""


def setup_logging(verbosity: int):
    """Configure the root logger from the -v count, replacing earlier handlers."""
    console_handler = logging.StreamHandler()
    handlers: list[logging.Handler] = [console_handler]
    if verbosity >= 2:
        level = logging.DEBUG
        console_handler.setLevel(logging.INFO)
        handlers.append(logging.FileHandler('debug.txt', mode='w', encoding='utf-8'))
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s',
                        handlers=handlers, force=True)


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def run(program: Program, check_only: bool):
    analyze(program)
    logger.info("semantic analysis passed")
    if not check_only:
        Interpreter().execute(program)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='petrel', description="Petrel language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase logging verbosity (can be repeated)')
    parser.add_argument('--parser', choices=sorted(FRONT_ENDS), default='descent',
                        help='front-end used to parse source files')
    parser.add_argument('--check', action='store_true', help='stop after semantic analysis')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PETREL_FILE', help='emit AST JSON for the given file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Petrel program file to execute')
    args = parser.parse_args(argv)
    setup_logging(args.v)

    try:
        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            ast_program = parse(read_source(program_file), args.parser)
            obj = ast_to_obj(ast_program)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(obj, out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            if not ast_path.exists():
                print(f"Error: file {ast_path} not found", file=sys.stderr)
                sys.exit(1)
            with open(ast_path, 'r', encoding='utf-8') as f:
                try:
                    data = json.load(f)
                except json.JSONDecodeError as e:
                    raise ParseError(f"invalid AST JSON: {e.msg}", e.lineno, e.colno)
            run(ast_from_obj(data), args.check)
            return

        # Default: execute source file, or the sample program
        if args.program:
            source = read_source(Path(args.program))
        else:
            logger.info("no program file given, running the sample program")
            source = SAMPLE_PROGRAM
        run(parse(source, args.parser), args.check)
    except PetrelError as e:
        print(f"{e.kind}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
