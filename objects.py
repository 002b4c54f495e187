"""
Monkey Object Model
Runtime values as tagged dictionaries, plus structural hash keys
"""

from typing import Any, Callable, Dict, List, Optional, Tuple


# ============================================================================
# TYPE TAGS
# ============================================================================

INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
STRING_OBJ = "STRING"
NULL_OBJ = "NULL"
ARRAY_OBJ = "ARRAY"
HASH_OBJ = "HASH"
FUNCTION_OBJ = "FUNCTION"
BUILTIN_OBJ = "BUILTIN"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"

HASHABLE_TYPES = (INTEGER_OBJ, BOOLEAN_OBJ, STRING_OBJ)

HashKey = Tuple[str, int]

_UINT64_MASK = 0xFFFFFFFFFFFFFFFF
_FNV_OFFSET_BASIS = 0xcbf29ce484222325
_FNV_PRIME = 0x100000001b3


# ============================================================================
# DATA STRUCTURES (Tagged Dictionaries)
# ============================================================================

def to_int64(value: int) -> int:
  """Wrap an arbitrary Python int to the signed 64-bit range"""
  value &= _UINT64_MASK
  return value - (1 << 64) if value >= (1 << 63) else value


def make_integer(value: int) -> Dict:
  """Create an integer value"""
  return {
      'type': INTEGER_OBJ,
      'value': to_int64(value)
  }


def make_string(value: str) -> Dict:
  """Create a string value"""
  return {
      'type': STRING_OBJ,
      'value': value
  }


# Process-wide singletons: identity comparison is valid for these
NULL = {'type': NULL_OBJ, 'value': None}
TRUE = {'type': BOOLEAN_OBJ, 'value': True}
FALSE = {'type': BOOLEAN_OBJ, 'value': False}


def native_bool_to_boolean_object(flag: bool) -> Dict:
  """Map a Python bool onto the boolean singletons"""
  return TRUE if flag else FALSE


def make_array(elements: List[Dict]) -> Dict:
  """Create an array value owning a fresh element list"""
  return {
      'type': ARRAY_OBJ,
      'elements': list(elements)
  }


def make_hash_pair(key: Dict, value: Dict) -> Dict:
  """Key object and value object stored under one hash key"""
  return {
      'key': key,
      'value': value
  }


def make_hash(pairs: Dict[HashKey, Dict]) -> Dict:
  """Create a hash value from hash-key -> pair mappings"""
  return {
      'type': HASH_OBJ,
      'pairs': pairs
  }


def make_function(parameters: Tuple, body: Any, env: Dict) -> Dict:
  """Create a closure over the defining environment (shared, not copied)"""
  return {
      'type': FUNCTION_OBJ,
      'parameters': parameters,
      'body': body,
      'env': env
  }


def make_builtin(name: str, fn: Callable[..., Dict]) -> Dict:
  """Wrap a host function as a callable value"""
  return {
      'type': BUILTIN_OBJ,
      'name': name,
      'fn': fn
  }


def make_return_value(value: Dict) -> Dict:
  """Control signal carrying a value out of nested blocks"""
  return {
      'type': RETURN_VALUE_OBJ,
      'value': value
  }


def make_error(message: str) -> Dict:
  """Control signal carrying an evaluation failure"""
  return {
      'type': ERROR_OBJ,
      'message': message
  }


# ============================================================================
# INSPECTION
# ============================================================================

def type_of(obj: Dict) -> str:
  return obj['type']


def is_error(obj: Optional[Dict]) -> bool:
  return obj is not None and obj['type'] == ERROR_OBJ


def inspect(obj: Dict) -> str:
  """Printable form of a runtime value"""
  obj_type = obj['type']

  if obj_type == INTEGER_OBJ:
    return str(obj['value'])
  elif obj_type == BOOLEAN_OBJ:
    return "true" if obj['value'] else "false"
  elif obj_type == STRING_OBJ:
    return obj['value']
  elif obj_type == NULL_OBJ:
    return "null"
  elif obj_type == ARRAY_OBJ:
    return "[" + ", ".join(inspect(e) for e in obj['elements']) + "]"
  elif obj_type == HASH_OBJ:
    pairs = [f"{inspect(p['key'])}: {inspect(p['value'])}" for p in obj['pairs'].values()]
    return "{" + ", ".join(pairs) + "}"
  elif obj_type == FUNCTION_OBJ:
    params = ", ".join(str(p) for p in obj['parameters'])
    return f"fn({params}) {obj['body']}"
  elif obj_type == BUILTIN_OBJ:
    return f"builtin function {obj['name']}"
  elif obj_type == RETURN_VALUE_OBJ:
    return inspect(obj['value'])
  elif obj_type == ERROR_OBJ:
    return f"ERROR: {obj['message']}"
  return f"<{obj_type}>"


# ============================================================================
# HASH KEYS
# ============================================================================

def fnv1a_64(data: bytes) -> int:
  """64-bit FNV-1a hash"""
  h = _FNV_OFFSET_BASIS
  for byte in data:
    h ^= byte
    h = (h * _FNV_PRIME) & _UINT64_MASK
  return h


def is_hashable(obj: Dict) -> bool:
  return obj['type'] in HASHABLE_TYPES


def hash_key(obj: Dict) -> HashKey:
  """Type-tagged 64-bit key; only integers, booleans and strings have one"""
  obj_type = obj['type']

  if obj_type == INTEGER_OBJ:
    return (obj_type, obj['value'] & _UINT64_MASK)
  elif obj_type == BOOLEAN_OBJ:
    return (obj_type, 1 if obj['value'] else 0)
  elif obj_type == STRING_OBJ:
    return (obj_type, fnv1a_64(obj['value'].encode('utf-8')))

  raise ValueError(f"unusable as hash key: {obj_type}")
