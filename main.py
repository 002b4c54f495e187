"""
Monkey Programming Language - Main Entry Point
Script runner and interactive shell around the parser and interpreter
"""

import sys
import argparse
from pathlib import Path
from typing import List
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from lexer import KEYWORDS, tokenize
from parsing import create_parser
from ast_nodes import pretty_print_ast
from environment import env_bindings
from error_handling import MonkeyParseError
from interpreter import create_interpreter, create_debug_interpreter, evaluate
from objects import ERROR_OBJ, NULL, inspect
from stdlib import BUILTINS


VERSION = "Monkey v1.0.0"
PROMPT = ">> "
HISTORY_FILE = "~/.monkey_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Monkey Programming Language - tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.monkey            # Run a Monkey script
  %(prog)s -i                       # Interactive mode
  %(prog)s --parse script.monkey    # Parse and show the reconstructed AST
  %(prog)s --tokens script.monkey   # Show the token stream
  %(prog)s --debug script.monkey    # Run with parser and evaluator tracing
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Monkey script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show the token stream (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  """Read a script, exiting with a hint on file errors"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)


def parse_checked(source: str, filename: str, debug: bool = False):
  """Parse source, raising MonkeyParseError if any syntax error was recorded"""
  parser = create_parser(source, debug)
  program = parser.parse_program()
  if parser.errors:
    raise MonkeyParseError(parser.error_details, source, filename)
  return program


def tokens_file(script_path: str) -> None:
  """Tokenize a Monkey script file and show the tokens"""
  source = read_source(script_path)
  for token in tokenize(source):
    print(token)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Monkey script file and show the AST"""
  source = read_source(script_path)
  try:
    program = parse_checked(source, script_path, debug)
  except MonkeyParseError as e:
    print(e)
    sys.exit(1)

  print(f"Parsed {len(program.statements)} top-level statements:")
  print("=" * 50)
  for i, statement in enumerate(program.statements, 1):
    print(f"\nStatement {i}: {statement}")
    if debug:
      print(pretty_print_ast(statement))


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a Monkey script file with full interpretation"""
  source = read_source(script_path)
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  try:
    program = parse_checked(source, script_path, debug)
    if debug:
      print(f"Parsed {len(program.statements)} statements")
    result = evaluate(program, interpreter.environment, debug)
  except MonkeyParseError as e:
    print(e)
    sys.exit(1)
  except RecursionError:
    print(f"Fatal error in '{script_path}': maximum recursion depth exceeded")
    sys.exit(1)

  if result is None:
    return
  if result['type'] == ERROR_OBJ:
    print(inspect(result))
    sys.exit(1)
  if result is not NULL:
    print(inspect(result))


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  # Setup history file
  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = sorted(KEYWORDS) + sorted(BUILTINS) + [":tokens", ":ast", ":env", ":help", "exit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  # Save history on exit
  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_parser_errors(errors: List[str]) -> None:
  print("Woops! We ran into some monkey business here!")
  print(" parser errors:")
  for message in errors:
    print(f"\t{message}")


def print_help() -> None:
  print("REPL Commands:")
  print("  :tokens <src>     - Show the token stream")
  print("  :ast <src>        - Show the parsed AST")
  print("  :env              - Show current environment")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  let x = 5;                          - Binding")
  print("  let add = fn(a, b) { a + b };       - Function literal")
  print("  add(1, 2)                           - Call")
  print("  if (x > 1) { \"big\" } else { \"small\" } - Conditional")
  print("  [1, 2, 3][0]  {\"a\": 1}[\"a\"]         - Arrays and hashes")
  print(f"  Builtins: {', '.join(sorted(BUILTINS))}")


def run_interactive_mode(debug: bool = False) -> None:
  """Run Monkey in interactive mode; bindings persist for the session"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input(PROMPT)
      stripped = code.strip()

      if stripped == "exit":
        break

      if not stripped:
        continue

      if stripped.startswith(":tokens "):
        for token in tokenize(stripped[len(":tokens "):]):
          print(f"  {token}")
        continue

      if stripped.startswith(":ast "):
        parser = create_parser(stripped[len(":ast "):], debug)
        program = parser.parse_program()
        if parser.errors:
          print_parser_errors(parser.errors)
          continue
        print(program)
        print(pretty_print_ast(program))
        continue

      if stripped == ":env":
        print("Current environment:")
        bindings = env_bindings(interpreter.environment)
        if bindings:
          for name, value in bindings.items():
            val_str = inspect(value)
            if len(val_str) > 60:
              val_str = val_str[:57] + "..."
            print(f"  {name} = {val_str}")
        else:
          print("  (no user-defined bindings)")
        continue

      if stripped == ":help":
        print_help()
        continue

      try:
        result, errors = interpreter.run(code)
      except RecursionError:
        print("Fatal error: maximum recursion depth exceeded")
        continue

      if errors:
        print_parser_errors(errors)
        continue

      if result is not None:
        print(inspect(result))

    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break


def show_language_info() -> None:
  """Show Monkey language information"""
  print("Monkey Programming Language")
  print("=" * 50)
  print("A small dynamically-typed expression language with:")
  print("• First-class functions and lexical closures")
  print("• Integers, booleans, strings, arrays and hashes")
  print("• Builtins: " + ", ".join(sorted(BUILTINS)))
  print()


def main() -> None:
  """Main entry point for Monkey"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  # No arguments - show info and start interactive mode
  if len(sys.argv) == 1:
    show_language_info()
    run_interactive_mode(debug=False)
    return

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      tokens_file(args.script)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()
