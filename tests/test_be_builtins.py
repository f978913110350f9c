import pytest
from beavieeer.be_builtins import StdLib, builtin_docs, to_be_name
from beavieeer.be_datatypes import Integer, String, Array, Error, Environment, TRUE, NULL
from beavieeer.be_interpreter import Evaluator
from beavieeer.be_parser import parse_program


def run_be(src: str):
    program, errors = parse_program(src)
    assert errors == [], [str(e) for e in errors]
    return Evaluator().eval(program, Environment())


def ints(*values):
    return Array(tuple(Integer(v) for v in values))


def strs(*values):
    return Array(tuple(String(v) for v in values))


def assert_error(src, message):
    result = run_be(src)
    assert isinstance(result, Error), f"expected an error, got {result!r}"
    assert result.message == message


# --- Registry ---

def test_registry_names_are_camel_case():
    lib = StdLib(Evaluator())
    assert lib.names == sorted([
        "len", "first", "last", "tail", "rest", "get", "push", "reverse", "sort",
        "map", "filter", "fold", "lowercase", "uppercase", "trim", "explode",
        "replaceString", "replaceN", "parseNumber",
    ])
    assert lib.arity["replaceN"] == 4
    assert lib.arity["fold"] == 3
    assert "tailOf" not in lib


def test_to_be_name():
    assert to_be_name("_len") == "len"
    assert to_be_name("_parse_number") == "parseNumber"
    assert to_be_name("_replace_n") == "replaceN"


def test_every_builtin_is_documented():
    docs = builtin_docs()
    lib = StdLib(Evaluator())
    for name in lib.names + ["print", "read", "readFile", "writeFile"]:
        assert name in docs, name
        assert docs[name]["description"]
        assert docs[name]["signature"]


def test_arity_is_checked_before_the_call():
    assert_error("len()", "wrong number of arguments to `len`: expected 1, got 0")
    assert_error('len("a", "b")', "wrong number of arguments to `len`: expected 1, got 2")


# --- Arrays and strings ---

@pytest.mark.parametrize("src, expected", [
    ('len("")', Integer(0)),
    ('len("four")', Integer(4)),
    ("len([1, 2, 3])", Integer(3)),
    ("first([1, 2, 3])", Integer(1)),
    ("last([1, 2, 3])", Integer(3)),
    ("tail([1, 2, 3])", ints(2, 3)),
    ("rest([1])", ints()),
    ("get([1, 2, 3], 1)", Integer(2)),
    ("push([1, 2], 3)", ints(1, 2, 3)),
    ("push([], [])", Array((Array(()),))),
    ("reverse([1, 2, 3])", ints(3, 2, 1)),
    ("sort([3, 1, 2])", ints(1, 2, 3)),
    ('sort(["b", "c", "a"])', strs("a", "b", "c")),
    ("sort([])", ints()),
])
def test_array_builtins(src, expected):
    assert run_be(src) == expected


def test_push_does_not_change_the_original():
    assert run_be("let a = [1]; let b = push(a, 2); [a, b]") == Array((ints(1), ints(1, 2)))


@pytest.mark.parametrize("src, message", [
    ("len(1)", "argument to `len` not supported, got INTEGER"),
    ("first([])", "`first` called on empty array"),
    ("last([])", "`last` called on empty array"),
    ("tail([])", "`tail` called on empty array"),
    ('first("abc")', "argument to `first` must be ARRAY, got STRING"),
    ("get([1, 2, 3], 5)", "index 5 out of range for array of length 3"),
    ("get([1, 2, 3], -1)", "index -1 out of range for array of length 3"),
    ('get([1], "0")', "argument to `get` must be ARRAY, INTEGER, got ARRAY, STRING"),
    ('sort([1, "a"])', "`sort` needs all INTEGER or all STRING elements, got INTEGER, STRING"),
])
def test_array_builtin_errors(src, message):
    assert_error(src, message)


# --- Higher-order ---

def test_map():
    assert run_be("map([1, 2, 3], fun(x) { x * 2 })") == ints(2, 4, 6)


def test_map_with_a_builtin():
    assert run_be('map(["ab", "c"], len)') == ints(2, 1)


def test_filter():
    assert run_be("filter([1, 2, 3, 4], fun(x) { x > 2 })") == ints(3, 4)


def test_fold():
    assert run_be("fold(fun(acc, x) { acc + x }, 0, [1, 2, 3, 4])") == Integer(10)
    assert run_be("fold(fun(acc, x) { push(acc, x) }, [], [])") == ints()


def test_higher_order_errors_propagate():
    assert_error('map([1, "a"], fun(x) { x + 1 })', "type mismatch: STRING + INTEGER")
    assert_error("map([1], 5)", "second argument to `map` must be callable, got INTEGER")
    assert_error("fold(1, 0, [])", "first argument to `fold` must be callable, got INTEGER")
    assert_error("fold(fun(a, b) { a }, 0, 5)", "third argument to `fold` must be ARRAY, got INTEGER")
    assert_error("filter([1], fun(a, b) { a })", "wrong number of arguments: expected 2, got 1")


def test_closures_work_inside_map():
    source = """
    let scale = fun(k) { fun(x) { x * k } };
    map([1, 2], scale(10))
    """
    assert run_be(source) == ints(10, 20)


# --- String transforms ---

@pytest.mark.parametrize("src, expected", [
    ('lowercase("HeLLo")', String("hello")),
    ('uppercase("HeLLo")', String("HELLO")),
    ('trim("  padded \\n")', String("padded")),
    ('explode("abc")', strs("a", "b", "c")),
    ('explode("")', strs()),
    ('replaceString("a-b-c", "-", "+")', String("a+b+c")),
    ('replaceN("a-b-c", "-", "+", 1)', String("a+b-c")),
    ('parseNumber("42")', Integer(42)),
    ('parseNumber(" -7 ")', Integer(-7)),
])
def test_string_builtins(src, expected):
    assert run_be(src) == expected


@pytest.mark.parametrize("src, message", [
    ('parseNumber("4x")', "could not parse '4x' as a number"),
    ('parseNumber("99999999999999999999")', "could not parse '99999999999999999999' as a number"),
    ("uppercase(1)", "argument to `uppercase` must be STRING, got INTEGER"),
    ('replaceN("a", "a", "b", -1)', "count for `replaceN` must not be negative, got -1"),
])
def test_string_builtin_errors(src, message):
    assert_error(src, message)


def test_builtins_return_values_not_null_on_success():
    assert run_be('len("x") == 1') == TRUE
    assert run_be("if (false) { len }") == NULL
