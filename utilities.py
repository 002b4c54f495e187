"""
Utilities module for the Monkey interpreter
Error builders, truthiness and argument validation shared by the evaluator and builtins
"""

from typing import Dict, List, Optional

from objects import FALSE, NULL, make_error


class MonkeyRuntimeError(Exception):
  """Host-side failure inside a builtin; converted to an Error value at the call boundary"""

  def __init__(self, message: str):
    self.message = message
    super().__init__(message)


# ==================== ERROR VALUE BUILDERS ====================

def new_error(message: str) -> Dict:
  """
  Build an Error object

  Args:
    message: Human-readable message, stored verbatim

  Returns:
    Error value dict
  """
  return make_error(message)


def type_mismatch_error(left: Dict, operator: str, right: Dict) -> Dict:
  """
  Error for an infix operator applied to operands of different types

  Examples:
    type_mismatch_error(five, "+", TRUE) -> ERROR: type mismatch: INTEGER + BOOLEAN
  """
  return new_error(f"type mismatch: {left['type']} {operator} {right['type']}")


def unknown_operator_error(operator: str, left: Optional[Dict], right: Dict) -> Dict:
  """
  Error for an operator with no rule for its operand types

  Args:
    operator: Operator text
    left: Left operand, or None for a prefix operator
    right: Right (or only) operand
  """
  if left is None:
    return new_error(f"unknown operator: {operator}{right['type']}")
  return new_error(f"unknown operator: {left['type']} {operator} {right['type']}")


def operator_not_supported_error(left: Dict, operator: str, right: Dict) -> Dict:
  """Error for an operator that the operand type does not define"""
  return new_error(f"operator not supported: {left['type']} {operator} {right['type']}")


def arity_error(expected: int, got: int) -> Dict:
  """Error for a user function called with the wrong number of arguments"""
  return new_error(f"wrong number of arguments. got={got}, want={expected}")


# ==================== TRUTHINESS ====================

def is_truthy(obj: Dict) -> bool:
  """Only null and false are falsy; integer zero is truthy"""
  if obj is NULL or obj is FALSE:
    return False
  return True


# ==================== VALIDATION UTILITIES ====================

def validate_function_args(
  func_name: str,
  args: List[Dict],
  expected_types: List[Optional[str]]
) -> None:
  """
  Validate builtin arguments against expected types

  Args:
    func_name: Builtin name for error messages
    args: Evaluated argument values
    expected_types: One type tag per parameter; None accepts any type

  Raises:
    MonkeyRuntimeError if validation fails
  """
  if len(args) != len(expected_types):
    raise MonkeyRuntimeError(
      f"wrong number of arguments. got={len(args)}, want={len(expected_types)}"
    )

  for arg, expected in zip(args, expected_types):
    if expected is not None and arg['type'] != expected:
      raise MonkeyRuntimeError(
        f"argument to `{func_name}` must be {expected}, got {arg['type']}"
      )

