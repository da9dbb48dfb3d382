"""Data-flow influence of variables through assignments and initialisers."""

from __future__ import annotations

from typing import Iterable

from confscope.srcml import (
    Node,
    VarDef,
    VarType,
    _ieq,
    _to_int,
    _walk,
    get_line,
    judge_var_used,
)

_ASSIGN_OPERATORS = frozenset({"=", "+=", "-=", "*=", "/=", "|="})


def _assigned_name(operator: Node) -> Node | None:
    """Return the nearest ``name`` node before an operator."""
    target = operator.prev
    while target is not None:
        if target.name == "name":
            return target
        target = target.prev
    return None


def scan_assign_var(node: Node | None, siblings: bool = False) -> list[tuple[str, int | None]]:
    """Print and return every variable assigned under the node with its line.

    Any operator containing ``=`` counts as an assignment. The line is taken
    from the assigned name or, for a compound name, from its first part.
    """
    found: list[tuple[str, int | None]] = []
    for cur in _walk(node, siblings):
        if cur.name == "expr":
            for operator in cur.children:
                if operator.name != "operator" or "=" not in operator.content():
                    continue
                target = _assigned_name(operator)
                if target is None:
                    continue
                head = target.first
                source = head if head is not None and head.name == "name" else target
                raw = source.get("line")
                name = target.content()
                print(f"{name}({raw if raw is not None else ''})")
                found.append((name, _to_int(raw) if raw is not None else None))
        found.extend(scan_assign_var(cur.first, True))
    return found


def scan_back_assign_var(node: Node | None) -> list[tuple[str, int | None]]:
    """Scan the assignments after the node, then after each enclosing node.

    The walk stops at the enclosing ``function`` node.
    """
    found: list[tuple[str, int | None]] = []
    while node is not None and node.name != "function":
        for sibling in _walk(node.next, True):
            found.extend(scan_assign_var(sibling))
        node = node.parent
    return found


def _is_global(name: str, var_types: list[VarType]) -> bool:
    # a member such as "s.x" belongs to a local "s" when "s" is declared here
    return not any(var.var_name in name for var in var_types)


def _init_target(init: Node) -> tuple[str, int] | None:
    declared = init.prev
    if declared is None:
        return None
    head = declared.first
    source = head if head is not None and head.name == "name" else declared
    return source.content(), _to_int(source.get("line"))


def extract_direct_influ_var(
    node: Node | None,
    var_name: str,
    var_types: Iterable[VarType] | None = None,
    siblings: bool = False,
) -> list[VarDef]:
    """Return the variables that ``var_name`` flows into directly.

    ``b = a + 1`` makes ``a`` influence ``b``; ``int c = a;`` makes ``a``
    influence the local ``c``. A variable assigned to is global unless one of
    ``var_types`` names part of it.
    """
    types = list(var_types or [])
    found: list[VarDef] = []
    for cur in _walk(node, siblings):
        if cur.name == "expr":
            for operator in cur.children:
                if operator.name != "operator" or operator.content() not in _ASSIGN_OPERATORS:
                    continue
                if not judge_var_used(cur, var_name):
                    continue
                target = _assigned_name(operator)
                if target is None:
                    continue
                influenced = target.content()
                if _ieq(influenced, var_name):
                    continue
                if any(_ieq(known.var_name, influenced) for known in found):
                    continue
                found.append(
                    VarDef(influenced, _is_global(influenced, types), get_line(target) or 0)
                )
        elif cur.name == "decl_stmt":
            for decl in cur.children:
                if decl.name != "decl":
                    continue
                for init in decl.children:
                    if init.name == "init" and judge_var_used(init, var_name):
                        target = _init_target(init)
                        if target is not None:
                            found.append(VarDef(target[0], False, target[1]))
                        break
        found.extend(extract_direct_influ_var(cur.first, var_name, types, True))
    return found


def slice_infl_var(
    var_name: str, node: Node | None, var_types: Iterable[VarType] | None = None
) -> list[VarDef]:
    """Return the variables ``var_name`` influences directly or transitively.

    A variable reached through another one counts only when it is assigned on
    or after the line of the variable it was reached through.
    """
    types = list(var_types or [])
    visited: set[str] = set()

    def follow(source: str) -> list[VarDef]:
        result = extract_direct_influ_var(node, source, types)
        # entries appended below are visited by this same loop
        for influenced in result:
            key = influenced.var_name.lower()
            if key in visited or _ieq(influenced.var_name, var_name):
                continue
            visited.add(key)
            for further in follow(influenced.var_name):
                if further.line < influenced.line:
                    continue
                if _ieq(var_name, further.var_name) or any(
                    _ieq(known.var_name, further.var_name) for known in result
                ):
                    continue
                result.append(further)
        return result

    return follow(var_name)