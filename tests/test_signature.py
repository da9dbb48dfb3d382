import pytest

from confscope.signature import (
    extract_error_func_argument_type,
    extract_func_argument_type,
    get_called_func_argument_type,
    judge_argument_similar,
)
from confscope.srcml import VarType, parse_xml


def _function(params: str):
    return parse_xml(
        "<function><type><name>void</name></type> <name>fun</name>"
        f"<parameter_list>({params})</parameter_list><block>{{}}</block></function>"
    )


def _param(type_xml: str, name: str = "") -> str:
    name_xml = f" <name>{name}</name>" if name else ""
    return f"<parameter><decl><type>{type_xml}</type>{name_xml}</decl></parameter>"


def _call(args: list[str]):
    inner = ", ".join(f"<argument><expr>{a}</expr></argument>" for a in args)
    return parse_xml(
        f"<call><name>f</name><argument_list>({inner})</argument_list></call>"
    )


def test_definition_with_two_parameters_matches_documented_example():
    node = _function(
        _param("<name>int</name>", "a")
        + ", "
        + _param("<specifier>const</specifier> <name>char</name> <modifier>*</modifier>", "str")
    )
    assert extract_func_argument_type(node) == "(int/char#2)"


def test_definition_without_parameters_is_void():
    assert extract_func_argument_type(_function("")) == "(void#0)"


def test_void_parameter_counts_zero():
    node = _function(_param("<name>void</name>"))
    assert extract_func_argument_type(node) == "(void#0)"


def test_void_pointer_parameter_counts_one():
    node = _function(_param("<name>void</name> <modifier>*</modifier>", "p"))
    result = extract_func_argument_type(node)
    assert result.startswith("(void#")
    assert result != "(void#0)"


def test_error_argument_list_empty_is_void():
    node = parse_xml("<argument_list>()</argument_list>")
    assert extract_error_func_argument_type(node) == "(void#0)"


def test_error_argument_list_takes_first_name_of_each_argument():
    node = parse_xml(
        "<argument_list>("
        "<argument><expr><name>int</name> <name>a</name></expr></argument>, "
        "<argument><expr><name>char</name> <name>s</name></expr></argument>"
        ")</argument_list>"
    )
    assert extract_error_func_argument_type(node) == "(int/char#2)"


def test_error_argument_type_requires_argument_list_node():
    node = parse_xml("<parameter_list>()</parameter_list>")
    assert extract_error_func_argument_type(node) == "(void#0)"


def test_call_signature_is_compatible_with_definition():
    definition = extract_func_argument_type(
        _function(
            _param("<name>int</name>", "a")
            + ", "
            + _param("<name>double</name>", "b")
            + ", "
            + _param("<name>char</name>", "c")
        )
    )
    types = [VarType("a", "int"), VarType("s", "char")]
    called = get_called_func_argument_type(
        _call(["<name>a</name>", "<literal>5</literal>", "<name>s</name>"]), types
    )
    assert called.endswith("#3)")
    assert "non" in called
    assert judge_argument_similar("f", "x.c", definition, called, 2)


def test_call_signature_mismatch_is_detected():
    definition = extract_func_argument_type(
        _function(_param("<name>int</name>", "a") + ", " + _param("<name>char</name>", "c"))
    )
    types = [VarType("a", "int"), VarType("s", "long")]
    called = get_called_func_argument_type(
        _call(["<name>a</name>", "<name>s</name>"]), types
    )
    assert not judge_argument_similar("f", "x.c", definition, called, 2)


def test_call_without_arguments_is_void():
    assert get_called_func_argument_type(_call([]), []) == "(void#0)"


def test_call_unknown_variable_is_non():
    called = get_called_func_argument_type(_call(["<name>zzz</name>"]), None)
    assert called == "(non#1)"


def test_single_definition_is_always_similar():
    assert judge_argument_similar("f", "x.c", "(int#1)", "(char/int#2)", 1)


def test_single_definition_from_callable():
    seen = []

    def count(func_name, source_file):
        seen.append((func_name, source_file))
        return 1

    assert judge_argument_similar("f", "x.c", "(int#1)", "(char/int#2)", count)
    assert seen == [("f", "x.c")]


def test_different_counts_are_not_similar():
    assert not judge_argument_similar("f", "x.c", "(int#1)", "(int/char#2)", 0)


def test_void_signatures_are_similar():
    assert judge_argument_similar("f", "x.c", "(void#0)", "(void#0)", None)


@pytest.mark.parametrize(
    "arg1, arg2, expected",
    [
        ("(int#1)", "(INT#1)", True),
        ("(int#1)", "(non#1)", True),
        ("(non#1)", "(char#1)", True),
        ("(int#1)", "(char#1)", False),
        ("(int/non#2)", "(int/char#2)", True),
        ("(int/long#2)", "(int/char#2)", False),
    ],
)
def test_argument_similarity(arg1, arg2, expected):
    assert judge_argument_similar("f", "x.c", arg1, arg2, 0) is expected


def test_similarity_is_symmetric():
    a, b = "(int/non/char#3)", "(int/double/char#3)"
    assert judge_argument_similar("f", "x.c", a, b, 2) == judge_argument_similar(
        "f", "x.c", b, a, 2
    )


def test_malformed_signature_raises():
    with pytest.raises(ValueError):
        judge_argument_similar("f", "x.c", "(", "(int#1)", 0)