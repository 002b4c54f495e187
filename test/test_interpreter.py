"""
Interpreter tests for Monkey
Evaluation semantics: arithmetic, control flow, closures, collections and error values
"""

import pytest
from interpreter import MonkeyInterpreter, create_debug_interpreter, create_interpreter
from objects import (
  ARRAY_OBJ, BOOLEAN_OBJ, ERROR_OBJ, FALSE, FUNCTION_OBJ, HASH_OBJ, INTEGER_OBJ, NULL, STRING_OBJ,
  TRUE, hash_key, make_integer, make_string,
)


def assert_integer(obj, expected):
  assert obj['type'] == INTEGER_OBJ, f"expected INTEGER, got {obj}"
  assert obj['value'] == expected


def assert_error(obj, message):
  assert obj['type'] == ERROR_OBJ, f"expected ERROR, got {obj}"
  assert obj['message'] == message


class TestIntegerArithmetic:
  """Test integer evaluation"""

  @pytest.mark.parametrize("source,expected", [
    ("5", 5),
    ("10", 10),
    ("-5", -5),
    ("-10", -10),
    ("5 + 5 + 5 + 5 - 10", 10),
    ("2 * 2 * 2 * 2 * 2", 32),
    ("-50 + 100 + -50", 0),
    ("5 * 2 + 10", 20),
    ("5 + 2 * 10", 25),
    ("20 + 2 * -10", 0),
    ("50 / 2 * 2 + 10", 60),
    ("2 * (5 + 10)", 30),
    ("3 * 3 * 3 + 10", 37),
    ("3 * (3 * 3) + 10", 37),
    ("(5 + 10 * 2 + 15 / 3) * 2 + -10", 50),
  ])
  def test_integer_expressions(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  @pytest.mark.parametrize("source,expected", [
    ("7 / 2", 3),
    ("-7 / 2", -3),
    ("7 / -2", -3),
    ("-7 / -2", 3),
  ])
  def test_division_truncates_toward_zero(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  def test_division_by_zero_is_an_error(self, run_source):
    assert_error(run_source("1 / 0"), "division by zero")

  def test_arithmetic_wraps_at_64_bits(self, run_source):
    assert_integer(run_source("9223372036854775807 + 1"), -9223372036854775808)
    assert_integer(run_source("-9223372036854775807 - 2"), 9223372036854775807)
    assert_integer(run_source("4611686018427387904 * 2"), -9223372036854775808)


class TestBooleansAndConditionals:
  """Test booleans, the bang operator and if/else"""

  @pytest.mark.parametrize("source,expected", [
    ("true", TRUE),
    ("false", FALSE),
    ("1 < 2", TRUE),
    ("1 > 2", FALSE),
    ("1 < 1", FALSE),
    ("1 == 1", TRUE),
    ("1 != 1", FALSE),
    ("1 == 2", FALSE),
    ("true == true", TRUE),
    ("false == false", TRUE),
    ("true == false", FALSE),
    ("true != false", TRUE),
    ("(1 < 2) == true", TRUE),
    ("(1 > 2) == true", FALSE),
  ])
  def test_boolean_expressions(self, run_source, source, expected):
    assert run_source(source) is expected

  @pytest.mark.parametrize("source,expected", [
    ("!true", FALSE),
    ("!false", TRUE),
    ("!5", FALSE),
    ("!!true", TRUE),
    ("!!false", FALSE),
    ("!!5", TRUE),
    ("!0", FALSE),
  ])
  def test_bang_operator(self, run_source, source, expected):
    assert run_source(source) is expected

  @pytest.mark.parametrize("source,expected", [
    ("if (true) { 10 }", 10),
    ("if (1) { 10 }", 10),
    ("if (0) { 10 }", 10),
    ("if (1 < 2) { 10 }", 10),
    ("if (1 > 2) { 10 } else { 20 }", 20),
    ("if (1 < 2) { 10 } else { 20 }", 10),
  ])
  def test_if_else_expressions(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  @pytest.mark.parametrize("source", ["if (false) { 10 }", "if (1 > 2) { 10 }", "if (if (false) { 1 }) { 10 }"])
  def test_if_without_taken_branch_is_null(self, run_source, source):
    assert run_source(source) is NULL

  def test_empty_block_is_null(self, run_source):
    assert run_source("if (true) { }") is NULL

  def test_block_with_only_let_is_null(self, run_source):
    assert run_source("if (true) { let a = 1; }") is NULL


class TestReturnStatements:
  """Test early return out of nested blocks"""

  @pytest.mark.parametrize("source,expected", [
    ("return 10;", 10),
    ("return 10; 9;", 10),
    ("return 2 * 5; 9;", 10),
    ("9; return 2 * 5; 9;", 10),
    ("if (10 > 1) { if (10 > 1) { return 10; } return 1; }", 10),
    ("let f = fn(x) { return x; x + 10; }; f(10);", 10),
    ("let f = fn(x) { let result = x + 10; return result; return 10; }; f(10);", 20),
  ])
  def test_return(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  def test_return_stops_at_function_boundary(self, run_source):
    source = "let inner = fn() { return 1; }; let outer = fn() { inner(); 2 }; outer()"
    assert_integer(run_source(source), 2)


class TestErrorHandling:
  """Test error values and their propagation"""

  @pytest.mark.parametrize("source,message", [
    ("5 + true;", "type mismatch: INTEGER + BOOLEAN"),
    ("5 + true; 5;", "type mismatch: INTEGER + BOOLEAN"),
    ("-true", "unknown operator: -BOOLEAN"),
    ("true + false;", "unknown operator: BOOLEAN + BOOLEAN"),
    ("true + false + true + false;", "unknown operator: BOOLEAN + BOOLEAN"),
    ("5; true + false; 5", "unknown operator: BOOLEAN + BOOLEAN"),
    ("if (10 > 1) { true + false; }", "unknown operator: BOOLEAN + BOOLEAN"),
    ("if (10 > 1) { if (10 > 1) { return true + false; } return 1; }", "unknown operator: BOOLEAN + BOOLEAN"),
    ("foobar", "identifier not found: foobar"),
    ('"Hello" - "World"', "operator not supported: STRING - STRING"),
    ('{"name": "Monkey"}[fn(x) { x }];', "unusable as hash key: FUNCTION"),
    ("{[1]: 2}", "unusable as hash key: ARRAY"),
    ("5(1)", "not a function: INTEGER"),
    ("1[0]", "index operator not supported: INTEGER"),
    ("[1, 2][true]", "index operator not supported: ARRAY"),
    ("fn(x) { x }(1, 2)", "wrong number of arguments. got=2, want=1"),
    ("fn(x, y) { x }(1)", "wrong number of arguments. got=1, want=2"),
    ("-(1 / 0)", "division by zero"),
    ("let x = 1 / 0; x", "division by zero"),
    ("[1, missing, 3]", "identifier not found: missing"),
  ])
  def test_error_messages(self, run_source, source, message):
    assert_error(run_source(source), message)

  def test_argument_error_short_circuits(self, run_source, capsys):
    result = run_source('puts(1, missing, puts("never"))')
    assert_error(result, "identifier not found: missing")
    assert capsys.readouterr().out == ""

  def test_error_is_not_bound(self):
    interpreter = create_interpreter()
    result, _ = interpreter.run("let x = 1 / 0;")
    assert_error(result, "division by zero")
    result, _ = interpreter.run("x")
    assert_error(result, "identifier not found: x")


class TestBindingsAndFunctions:
  """Test let bindings, closures and scope"""

  @pytest.mark.parametrize("source,expected", [
    ("let a = 5; a;", 5),
    ("let a = 5 * 5; a;", 25),
    ("let a = 5; let b = a; b;", 5),
    ("let a = 5; let b = a; let c = a + b + 5; c;", 15),
  ])
  def test_let_statements(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  def test_let_only_program_has_no_value(self, run_source):
    assert run_source("let a = 5;") is None
    assert run_source("") is None

  def test_function_object(self, run_source):
    fn = run_source("fn(x) { x + 2; };")
    assert fn['type'] == FUNCTION_OBJ
    assert [p.value for p in fn['parameters']] == ["x"]
    assert str(fn['body']) == "{ (x + 2) }"

  @pytest.mark.parametrize("source,expected", [
    ("let identity = fn(x) { x; }; identity(5);", 5),
    ("let identity = fn(x) { return x; }; identity(5);", 5),
    ("let double = fn(x) { x * 2; }; double(5);", 10),
    ("let add = fn(x, y) { x + y; }; add(5, 5);", 10),
    ("let add = fn(x, y) { x + y; }; add(5 + 5, add(5, 5));", 20),
    ("fn(x) { x; }(5)", 5),
  ])
  def test_function_application(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  def test_closures(self, run_source):
    source = """
    let newAdder = fn(x) { fn(y) { x + y }; };
    let addTwo = newAdder(2);
    addTwo(2);
    """
    assert_integer(run_source(source), 4)

  def test_closure_sees_later_bindings_in_captured_scope(self, run_source):
    source = "let f = fn() { later }; let later = 7; f()"
    assert_integer(run_source(source), 7)

  def test_parameters_shadow_outer_bindings(self, run_source):
    source = "let x = 10; let f = fn(x) { x * 2 }; f(3) + x"
    assert_integer(run_source(source), 16)

  def test_let_inside_function_does_not_leak(self, run_source):
    source = "let x = 1; let f = fn() { let x = 2; x }; f() * 10 + x"
    assert_integer(run_source(source), 21)

  def test_callee_does_not_see_caller_scope(self, run_source):
    source = "let f = fn() { y }; let g = fn(y) { f() }; g(1)"
    assert_error(run_source(source), "identifier not found: y")

  def test_recursion(self, run_source):
    source = """
    let fib = fn(n) { if (n < 2) { n } else { fib(n - 1) + fib(n - 2) } };
    fib(15)
    """
    assert_integer(run_source(source), 610)

  def test_deep_recursion(self, run_source):
    source = """
    let count = fn(n) { if (n == 0) { 0 } else { 1 + count(n - 1) } };
    count(500)
    """
    assert_integer(run_source(source), 500)

  def test_recursive_reduce_over_long_array(self, run_source):
    source = """
    let build = fn(n, acc) { if (n == 0) { acc } else { build(n - 1, push(acc, n)) } };
    let sum = fn(arr) { if (len(arr) == 0) { 0 } else { first(arr) + sum(rest(arr)) } };
    sum(build(300, []))
    """
    assert_integer(run_source(source), 45150)

  def test_higher_order_functions(self, run_source):
    source = """
    let map = fn(arr, f) {
      let iter = fn(arr, acc) {
        if (len(arr) == 0) { acc } else { iter(rest(arr), push(acc, f(first(arr)))) }
      };
      iter(arr, [])
    };
    map([1, 2, 3], fn(x) { x * 2 })
    """
    result = run_source(source)
    assert result['type'] == ARRAY_OBJ
    assert [e['value'] for e in result['elements']] == [2, 4, 6]


class TestStrings:
  """Test string literals and concatenation"""

  def test_string_literal(self, run_source):
    result = run_source('"Hello World!"')
    assert result['type'] == STRING_OBJ
    assert result['value'] == "Hello World!"

  def test_string_concatenation(self, run_source):
    assert run_source('"Hello" + " " + "World!"')['value'] == "Hello World!"

  def test_string_equality_is_not_supported(self, run_source):
    assert_error(run_source('"a" == "a"'), "operator not supported: STRING == STRING")


class TestArrays:
  """Test array literals and indexing"""

  def test_array_literal(self, run_source):
    result = run_source("[1, 2 * 2, 3 + 3]")
    assert result['type'] == ARRAY_OBJ
    assert [e['value'] for e in result['elements']] == [1, 4, 6]

  @pytest.mark.parametrize("source,expected", [
    ("[1, 2, 3][0]", 1),
    ("[1, 2, 3][1]", 2),
    ("[1, 2, 3][2]", 3),
    ("let i = 0; [1][i];", 1),
    ("[1, 2, 3][1 + 1];", 3),
    ("let myArray = [1, 2, 3]; myArray[2];", 3),
    ("let myArray = [1, 2, 3]; myArray[0] + myArray[1] + myArray[2];", 6),
    ("let myArray = [1, 2, 3]; let i = myArray[0]; myArray[i]", 2),
  ])
  def test_array_index(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  @pytest.mark.parametrize("source", ["[1, 2, 3][3]", "[1, 2, 3][-1]", "[][0]"])
  def test_array_index_out_of_range_is_null(self, run_source, source):
    assert run_source(source) is NULL


class TestHashes:
  """Test hash literals and lookup"""

  def test_hash_literal(self, run_source):
    source = """
    let two = "two";
    {"one": 10 - 9, two: 1 + 1, "thr" + "ee": 6 / 2, 4: 4, true: 5, false: 6}
    """
    result = run_source(source)
    assert result['type'] == HASH_OBJ
    expected = {
      hash_key(make_string("one")): 1,
      hash_key(make_string("two")): 2,
      hash_key(make_string("three")): 3,
      hash_key(make_integer(4)): 4,
      hash_key(TRUE): 5,
      hash_key(FALSE): 6,
    }
    assert {k: pair['value']['value'] for k, pair in result['pairs'].items()} == expected

  def test_duplicate_key_keeps_last_value(self, run_source):
    result = run_source('{"a": 1, "a": 2}')
    assert len(result['pairs']) == 1
    assert_integer(run_source('{"a": 1, "a": 2}["a"]'), 2)

  @pytest.mark.parametrize("source,expected", [
    ('{"foo": 5}["foo"]', 5),
    ('let key = "foo"; {"foo": 5}[key]', 5),
    ("{5: 5}[5]", 5),
    ("{true: 5}[true]", 5),
    ("{false: 5}[false]", 5),
    ("{-1: 7}[0 - 1]", 7),
  ])
  def test_hash_index(self, run_source, source, expected):
    assert_integer(run_source(source), expected)

  @pytest.mark.parametrize("source", ['{"foo": 5}["bar"]', '{}["foo"]', '{1: 1}[true]'])
  def test_missing_key_is_null(self, run_source, source):
    assert run_source(source) is NULL


class TestIdentityEquality:
  """Non-integer, non-string values compare by identity"""

  def test_same_binding_is_equal(self, run_source):
    assert run_source("let a = [1]; a == a") is TRUE

  def test_structurally_equal_arrays_differ(self, run_source):
    assert run_source("[1] == [1]") is FALSE
    assert run_source("[1] != [1]") is TRUE

  def test_null_equals_null(self, run_source):
    assert run_source("if (false) { 1 } == if (false) { 2 }") is TRUE


class TestInterpreterSession:
  """Test the persistent session wrapper used by the REPL"""

  def test_bindings_persist_across_runs(self):
    interpreter = MonkeyInterpreter()
    result, errors = interpreter.run("let x = 5;")
    assert result is None and errors == []
    result, errors = interpreter.run("x * 2")
    assert errors == []
    assert_integer(result, 10)

  def test_parse_errors_skip_evaluation(self):
    interpreter = create_interpreter()
    result, errors = interpreter.run("let x = 5; let = 3;")
    assert result is None
    assert errors == [
      "expected next token to be IDENT, got = instead",
      "no prefix parse function for = found",
    ]
    result, _ = interpreter.run("x")
    assert_error(result, "identifier not found: x")

  def test_debug_interpreter_traces_nodes(self, capsys):
    interpreter = create_debug_interpreter()
    result, _ = interpreter.run("1 + 2")
    assert_integer(result, 3)
    out = capsys.readouterr().out
    assert "Evaluating: InfixExpression (1 + 2)" in out
    assert "Evaluating: IntegerLiteral 2" in out

  def test_builtin_values_are_first_class(self):
    interpreter = create_interpreter()
    interpreter.run("let size = len;")
    result, _ = interpreter.run('size("four")')
    assert_integer(result, 4)
    result, _ = interpreter.run("len")
    assert result['type'] == "BUILTIN"

  def test_boolean_type_tag(self, run_source):
    assert run_source("true")['type'] == BOOLEAN_OBJ
