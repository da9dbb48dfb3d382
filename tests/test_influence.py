from confscope.influence import (
    extract_direct_influ_var,
    scan_assign_var,
    scan_back_assign_var,
    slice_infl_var,
)
from confscope.srcml import VarDef, VarType, parse_xml


def assign(target, source, line, op="="):
    return (
        f'<expr_stmt><expr><name line="{line}">{target}</name>'
        f"<operator>{op}</operator><name line=\"{line}\">{source}</name>"
        "<operator>+</operator><literal>1</literal></expr></expr_stmt>"
    )


def function(*statements):
    body = "".join(statements)
    return parse_xml(
        f'<unit><function><name line="1">f</name><block>{body}</block></function></unit>'
    )


def block_of(root):
    return root.first.children[1]


def test_direct_assignment_is_global_without_types():
    root = function(assign("b", "a", 3))
    assert extract_direct_influ_var(block_of(root), "a") == [VarDef("b", True, 3)]


def test_direct_assignment_local_when_declared():
    root = function(assign("b", "a", 3))
    result = extract_direct_influ_var(block_of(root), "a", [VarType("b", "int", 2)])
    assert [v.is_global for v in result] == [False]


def test_self_assignment_ignored():
    root = function(assign("a", "a", 3))
    assert extract_direct_influ_var(block_of(root), "a") == []


def test_unrelated_operator_ignored():
    root = function(assign("b", "a", 3, op="&lt;"))
    assert extract_direct_influ_var(block_of(root), "a") == []


def test_initialiser_influence_is_local():
    root = function(
        "<decl_stmt><decl><type><name>int</name></type>"
        '<name line="5">c</name><init><operator>=</operator>'
        "<expr><name>a</name></expr></init></decl></decl_stmt>"
    )
    assert extract_direct_influ_var(block_of(root), "a") == [VarDef("c", False, 5)]


def test_slice_follows_chain():
    root = function(assign("b", "a", 3), assign("c", "b", 4))
    result = slice_infl_var("a", block_of(root))
    assert [(v.var_name, v.line) for v in result] == [("b", 3), ("c", 4)]


def test_slice_ignores_earlier_assignments():
    root = function(assign("c", "b", 2), assign("b", "a", 3))
    result = slice_infl_var("a", block_of(root))
    assert [v.var_name for v in result] == ["b"]


def test_slice_does_not_report_source_in_cycle():
    root = function(assign("b", "a", 3), assign("a", "b", 4))
    result = slice_infl_var("a", block_of(root))
    assert [v.var_name for v in result] == ["b"]


def test_slice_without_influence_is_empty():
    root = function(assign("b", "x", 3))
    assert slice_infl_var("a", block_of(root)) == []


def test_scan_assign_var_prints_and_returns(capsys):
    root = function(assign("b", "a", 3))
    result = scan_assign_var(block_of(root))
    assert result == [("b", 3)]
    assert capsys.readouterr().out == "b(3)\n"


def test_scan_assign_var_compound_name_uses_first_part_line():
    root = parse_xml(
        '<expr><name><name line="7">s</name><operator>.</operator><name>x</name></name>'
        "<operator>=</operator><literal>1</literal></expr>"
    )
    assert scan_assign_var(root) == [("s.x", 7)]


def test_scan_back_assign_var_only_scans_later_statements():
    root = function(assign("b", "a", 3), assign("c", "a", 4))
    first_statement = block_of(root).first
    names = [name for name, _ in scan_back_assign_var(first_statement)]
    assert names == ["c"]


def test_scan_back_assign_var_stops_at_function():
    root = function(assign("b", "a", 3))
    assert scan_back_assign_var(root.first) == []