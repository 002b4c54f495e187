"""
Monkey Interpreter
Recursive tree-walking evaluator over the AST.

Errors and early returns are ordinary values (ERROR / RETURN_VALUE objects) that
every rule checks and propagates; a RETURN_VALUE is only unwrapped at a function
call boundary and at the program top level.
"""

import sys
from typing import Dict, List, Optional, Sequence, Tuple

from ast_nodes import (
  ArrayLiteral,
  BlockStatement,
  Boolean,
  CallExpression,
  Expression,
  ExpressionStatement,
  FunctionLiteral,
  HashLiteral,
  Identifier,
  IfExpression,
  IndexExpression,
  InfixExpression,
  IntegerLiteral,
  LetStatement,
  Node,
  PrefixExpression,
  Program,
  ReturnStatement,
  StringLiteral,
)
from environment import env_get, env_set, make_enclosed_environment, make_environment
from objects import (
  ARRAY_OBJ,
  BUILTIN_OBJ,
  ERROR_OBJ,
  FUNCTION_OBJ,
  HASH_OBJ,
  INTEGER_OBJ,
  NULL,
  RETURN_VALUE_OBJ,
  STRING_OBJ,
  hash_key,
  is_error,
  is_hashable,
  make_array,
  make_function,
  make_hash,
  make_hash_pair,
  make_integer,
  make_return_value,
  make_string,
  native_bool_to_boolean_object,
)
from parsing import create_parser
from stdlib import lookup_builtin
from utilities import (
  arity_error,
  is_truthy,
  new_error,
  operator_not_supported_error,
  type_mismatch_error,
  unknown_operator_error,
)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(node: Node, env: Dict, debug: bool = False) -> Optional[Dict]:
  """
  Evaluate an AST node in an environment.
  Returns the resulting object, or None for statements that produce no value.
  """
  if debug:
    print(f"Evaluating: {type(node).__name__} {node}")

  # Statements
  if isinstance(node, Program):
    return eval_program(node, env, debug)
  elif isinstance(node, ExpressionStatement):
    return eval_ast(node.expression, env, debug)
  elif isinstance(node, BlockStatement):
    return eval_block_statement(node, env, debug)
  elif isinstance(node, LetStatement):
    return eval_let_statement(node, env, debug)
  elif isinstance(node, ReturnStatement):
    value = eval_ast(node.return_value, env, debug)
    if is_error(value):
      return value
    return make_return_value(value)

  # Literals
  elif isinstance(node, IntegerLiteral):
    return make_integer(node.value)
  elif isinstance(node, StringLiteral):
    return make_string(node.value)
  elif isinstance(node, Boolean):
    return native_bool_to_boolean_object(node.value)
  elif isinstance(node, ArrayLiteral):
    elements = eval_expressions(node.elements, env, debug)
    if len(elements) == 1 and is_error(elements[0]):
      return elements[0]
    return make_array(elements)
  elif isinstance(node, HashLiteral):
    return eval_hash_literal(node, env, debug)
  elif isinstance(node, FunctionLiteral):
    return make_function(node.parameters, node.body, env)

  # Expressions
  elif isinstance(node, Identifier):
    return eval_identifier(node, env)
  elif isinstance(node, PrefixExpression):
    right = eval_ast(node.right, env, debug)
    if is_error(right):
      return right
    return eval_prefix_expression(node.operator, right)
  elif isinstance(node, InfixExpression):
    left = eval_ast(node.left, env, debug)
    if is_error(left):
      return left
    right = eval_ast(node.right, env, debug)
    if is_error(right):
      return right
    return eval_infix_expression(node.operator, left, right)
  elif isinstance(node, IfExpression):
    return eval_if_expression(node, env, debug)
  elif isinstance(node, CallExpression):
    return eval_call_expression(node, env, debug)
  elif isinstance(node, IndexExpression):
    left = eval_ast(node.left, env, debug)
    if is_error(left):
      return left
    index = eval_ast(node.index, env, debug)
    if is_error(index):
      return index
    return eval_index_expression(left, index)

  return new_error(f"unknown node type: {type(node).__name__}")


def eval_program(program: Program, env: Dict, debug: bool = False) -> Optional[Dict]:
  """Run top-level statements; unwrap a return, stop at the first error"""
  result = None

  for statement in program.statements:
    result = eval_ast(statement, env, debug)

    if result is not None:
      if result['type'] == RETURN_VALUE_OBJ:
        return result['value']
      if result['type'] == ERROR_OBJ:
        return result

  return result


def eval_block_statement(block: BlockStatement, env: Dict, debug: bool = False) -> Dict:
  """Run a block, passing RETURN_VALUE and ERROR upward still wrapped"""
  result = None

  for statement in block.statements:
    result = eval_ast(statement, env, debug)

    if result is not None and result['type'] in (RETURN_VALUE_OBJ, ERROR_OBJ):
      return result

  return result if result is not None else NULL


def eval_let_statement(node: LetStatement, env: Dict, debug: bool = False) -> Optional[Dict]:
  value = eval_ast(node.value, env, debug)
  if is_error(value):
    return value
  env_set(env, node.name.value, value)
  return None


def eval_identifier(node: Identifier, env: Dict) -> Dict:
  """Environment chain first, then the builtin table"""
  value = env_get(env, node.value)
  if value is not None:
    return value

  builtin = lookup_builtin(node.value)
  if builtin is not None:
    return builtin

  return new_error(f"identifier not found: {node.value}")


def eval_expressions(expressions: Sequence[Expression], env: Dict, debug: bool = False) -> List[Dict]:
  """
  Evaluate left to right. On the first error, return a one-element list holding it;
  later expressions are not evaluated.
  """
  result = []

  for expression in expressions:
    evaluated = eval_ast(expression, env, debug)
    if is_error(evaluated):
      return [evaluated]
    result.append(evaluated)

  return result


# ============================================================================
# OPERATORS
# ============================================================================

def eval_prefix_expression(operator: str, right: Dict) -> Dict:
  if operator == "!":
    return eval_bang_operator_expression(right)
  elif operator == "-":
    return eval_minus_prefix_operator_expression(right)
  return unknown_operator_error(operator, None, right)


def eval_bang_operator_expression(right: Dict) -> Dict:
  return native_bool_to_boolean_object(not is_truthy(right))


def eval_minus_prefix_operator_expression(right: Dict) -> Dict:
  if right['type'] != INTEGER_OBJ:
    return unknown_operator_error("-", None, right)
  return make_integer(-right['value'])


def eval_infix_expression(operator: str, left: Dict, right: Dict) -> Dict:
  if left['type'] != right['type']:
    return type_mismatch_error(left, operator, right)
  if left['type'] == INTEGER_OBJ:
    return eval_integer_infix_expression(operator, left, right)
  if left['type'] == STRING_OBJ:
    return eval_string_infix_expression(operator, left, right)

  # Identity only: exact for the boolean/null singletons, never a deep comparison
  if operator == "==":
    return native_bool_to_boolean_object(left is right)
  if operator == "!=":
    return native_bool_to_boolean_object(left is not right)

  return unknown_operator_error(operator, left, right)


def _truncating_divide(dividend: int, divisor: int) -> int:
  quotient = abs(dividend) // abs(divisor)
  return -quotient if (dividend < 0) != (divisor < 0) else quotient


def eval_integer_infix_expression(operator: str, left: Dict, right: Dict) -> Dict:
  left_val = left['value']
  right_val = right['value']

  if operator == "+":
    return make_integer(left_val + right_val)
  elif operator == "-":
    return make_integer(left_val - right_val)
  elif operator == "*":
    return make_integer(left_val * right_val)
  elif operator == "/":
    if right_val == 0:
      return new_error("division by zero")
    return make_integer(_truncating_divide(left_val, right_val))
  elif operator == "<":
    return native_bool_to_boolean_object(left_val < right_val)
  elif operator == ">":
    return native_bool_to_boolean_object(left_val > right_val)
  elif operator == "==":
    return native_bool_to_boolean_object(left_val == right_val)
  elif operator == "!=":
    return native_bool_to_boolean_object(left_val != right_val)

  return unknown_operator_error(operator, left, right)


def eval_string_infix_expression(operator: str, left: Dict, right: Dict) -> Dict:
  if operator != "+":
    return operator_not_supported_error(left, operator, right)
  return make_string(left['value'] + right['value'])


# ============================================================================
# CONTROL FLOW AND FUNCTIONS
# ============================================================================

def eval_if_expression(node: IfExpression, env: Dict, debug: bool = False) -> Dict:
  condition = eval_ast(node.condition, env, debug)
  if is_error(condition):
    return condition

  if is_truthy(condition):
    return eval_ast(node.consequence, env, debug)
  elif node.alternative is not None:
    return eval_ast(node.alternative, env, debug)
  return NULL


def eval_call_expression(node: CallExpression, env: Dict, debug: bool = False) -> Dict:
  function = eval_ast(node.function, env, debug)
  if is_error(function):
    return function

  args = eval_expressions(node.arguments, env, debug)
  if len(args) == 1 and is_error(args[0]):
    return args[0]

  return apply_function(function, args, debug)


def apply_function(function: Dict, args: List[Dict], debug: bool = False) -> Dict:
  """Call a closure or a builtin with already-evaluated arguments"""
  if function['type'] == FUNCTION_OBJ:
    parameters = function['parameters']
    if len(parameters) != len(args):
      return arity_error(len(parameters), len(args))

    extended_env = extend_function_env(function, args)
    evaluated = eval_ast(function['body'], extended_env, debug)
    return unwrap_return_value(evaluated)

  if function['type'] == BUILTIN_OBJ:
    return function['fn'](*args)

  return new_error(f"not a function: {function['type']}")


def extend_function_env(function: Dict, args: List[Dict]) -> Dict:
  """New call scope whose outer link is the captured environment, not the caller's"""
  env = make_enclosed_environment(function['env'])
  for param, arg in zip(function['parameters'], args):
    env_set(env, param.value, arg)
  return env


def unwrap_return_value(obj: Dict) -> Dict:
  if obj['type'] == RETURN_VALUE_OBJ:
    return obj['value']
  return obj


# ============================================================================
# COLLECTIONS
# ============================================================================

def eval_index_expression(left: Dict, index: Dict) -> Dict:
  if left['type'] == ARRAY_OBJ and index['type'] == INTEGER_OBJ:
    return eval_array_index_expression(left, index)
  if left['type'] == HASH_OBJ:
    return eval_hash_index_expression(left, index)
  return new_error(f"index operator not supported: {left['type']}")


def eval_array_index_expression(array: Dict, index: Dict) -> Dict:
  elements = array['elements']
  idx = index['value']
  if idx < 0 or idx >= len(elements):
    return NULL
  return elements[idx]


def eval_hash_index_expression(hash_obj: Dict, index: Dict) -> Dict:
  if not is_hashable(index):
    return new_error(f"unusable as hash key: {index['type']}")

  pair = hash_obj['pairs'].get(hash_key(index))
  if pair is None:
    return NULL
  return pair['value']


def eval_hash_literal(node: HashLiteral, env: Dict, debug: bool = False) -> Dict:
  """Evaluate pairs in source order; an unhashable key aborts the whole literal"""
  pairs = {}

  for key_node, value_node in node.pairs:
    key = eval_ast(key_node, env, debug)
    if is_error(key):
      return key

    if not is_hashable(key):
      return new_error(f"unusable as hash key: {key['type']}")

    value = eval_ast(value_node, env, debug)
    if is_error(value):
      return value

    pairs[hash_key(key)] = make_hash_pair(key, value)

  return make_hash(pairs)


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

# One Monkey call level costs about a dozen Python frames
RECURSION_LIMIT = 20000


def raise_recursion_limit(limit: int = RECURSION_LIMIT) -> None:
  """Raise the host recursion limit so user recursion is bounded by the stack, not the default limit"""
  if sys.getrecursionlimit() < limit:
    sys.setrecursionlimit(limit)


def evaluate(program: Program, env: Dict, debug: bool = False) -> Optional[Dict]:
  """
  Evaluate a parsed program in a root environment.
  Returns None when the program produced no value (e.g. only let statements).
  """
  raise_recursion_limit()
  return eval_program(program, env, debug)


class MonkeyInterpreter:
  """Parser and evaluator bound to one persistent session environment"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.environment = make_environment()

  def run(self, source: str) -> Tuple[Optional[Dict], List[str]]:
    """
    Parse and evaluate source in the session environment.
    When parsing fails nothing is evaluated and the error messages are returned.
    """
    parser = create_parser(source, self.debug)
    program = parser.parse_program()
    if parser.errors:
      return None, parser.errors
    return evaluate(program, self.environment, self.debug), []


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False) -> MonkeyInterpreter:
  """Factory function returning an interpreter"""
  return MonkeyInterpreter(debug=debug)


def create_debug_interpreter() -> MonkeyInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
