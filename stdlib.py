"""
Monkey Standard Library
Fixed table of host-provided builtins, consulted after environment lookup fails
"""

from functools import wraps
from typing import Callable, Dict, Optional

from objects import (
  ARRAY_OBJ,
  NULL,
  STRING_OBJ,
  inspect,
  make_array,
  make_builtin,
  make_error,
  make_integer,
)
from utilities import MonkeyRuntimeError, validate_function_args


BUILTINS: Dict[str, Dict] = {}


def register_builtin(name: str):
  """Register a host function under a Monkey name; any exception it raises becomes an Error value"""
  def decorator(fn: Callable[..., Dict]) -> Callable[..., Dict]:
    @wraps(fn)
    def guarded(*args: Dict) -> Dict:
      try:
        return fn(*args)
      except MonkeyRuntimeError as e:
        return make_error(e.message)
      except Exception as e:
        return make_error(f"{name}: {e}")

    BUILTINS[name] = make_builtin(name, guarded)
    return fn
  return decorator


def lookup_builtin(name: str) -> Optional[Dict]:
  return BUILTINS.get(name)


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

@register_builtin("puts")
def monkey_puts(*args: Dict) -> Dict:
  """Print each argument on its own line"""
  for arg in args:
    print(inspect(arg))
  return NULL


# ============================================================================
# LENGTH
# ============================================================================

@register_builtin("len")
def monkey_len(*args: Dict) -> Dict:
  """Length of a string or an array"""
  validate_function_args("len", list(args), [None])
  value = args[0]
  if value['type'] == STRING_OBJ:
    return make_integer(len(value['value']))
  elif value['type'] == ARRAY_OBJ:
    return make_integer(len(value['elements']))
  raise MonkeyRuntimeError(f"argument to `len` not supported, got {value['type']}")


# ============================================================================
# ARRAY FUNCTIONS
# ============================================================================

@register_builtin("first")
def monkey_first(*args: Dict) -> Dict:
  """First element of an array, or null when empty"""
  validate_function_args("first", list(args), [ARRAY_OBJ])
  elements = args[0]['elements']
  return elements[0] if elements else NULL


@register_builtin("last")
def monkey_last(*args: Dict) -> Dict:
  """Last element of an array, or null when empty"""
  validate_function_args("last", list(args), [ARRAY_OBJ])
  elements = args[0]['elements']
  return elements[-1] if elements else NULL


@register_builtin("rest")
def monkey_rest(*args: Dict) -> Dict:
  """New array without the first element, or null when empty"""
  validate_function_args("rest", list(args), [ARRAY_OBJ])
  elements = args[0]['elements']
  if not elements:
    return NULL
  return make_array(elements[1:])


@register_builtin("push")
def monkey_push(*args: Dict) -> Dict:
  """New array with a value appended; the input array is left untouched"""
  validate_function_args("push", list(args), [ARRAY_OBJ, None])
  return make_array(args[0]['elements'] + [args[1]])
