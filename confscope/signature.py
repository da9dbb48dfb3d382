"""Argument-type signatures of function definitions and calls.

A signature has the form ``(type1/type2/...#count)``. A function that takes
nothing is written ``(void#0)``. An argument whose type cannot be found is
written ``non``.
"""

from __future__ import annotations

from typing import Callable, Iterable, Union

from confscope.srcml import Node, VarType

VOID_SIGNATURE = "(void#0)"
UNKNOWN_TYPE = "non"

DefinitionCount = Union[int, None, Callable[[str, str], int]]


def _ieq(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def _compose(parts: list[str], force_zero: bool = False) -> str:
    """Join collected types into a signature string."""
    if not parts:
        return VOID_SIGNATURE
    body = "/".join(parts)
    count = body.count("/") + 1
    if count <= 1 and force_zero:
        count = 0
    return f"({body}#{count})"


def _argument_count(signature: str) -> int:
    if len(signature) < 2:
        raise ValueError(f"malformed argument signature: {signature!r}")
    return ord(signature[-2]) - ord("0")


def _signature_body(signature: str) -> str:
    rest = signature[1:]
    if "#" in rest:
        return rest.split("#", 1)[0]
    return rest + signature[-1:]


def _split_types(body: str, count: int) -> list[str]:
    if count <= 0:
        return []
    parts = body.split("/", count - 1)
    parts.extend([""] * (count - len(parts)))
    return parts


def _compatible(a: str, b: str) -> bool:
    return _ieq(a, UNKNOWN_TYPE) or _ieq(b, UNKNOWN_TYPE) or _ieq(a, b)


def judge_argument_similar(
    func_name: str,
    source_file: str,
    arg1: str,
    arg2: str,
    definition_count: DefinitionCount = None,
) -> bool:
    """Tell whether two argument signatures may denote the same function.

    ``definition_count`` is the number of known definitions of ``func_name``
    in ``source_file``, or a callable returning it. When there is exactly one
    definition, the signatures are not compared at all.
    """
    if callable(definition_count):
        definition_count = definition_count(func_name, source_file)
    if definition_count == 1:
        return True

    count1 = _argument_count(arg1)
    count2 = _argument_count(arg2)
    if count1 != count2:
        return False
    if count1 == 0:
        return True

    body1 = _signature_body(arg1)
    body2 = _signature_body(arg2)
    if count1 == 1:
        return _compatible(body1, body2)

    types1 = _split_types(body1, count1)
    types2 = _split_types(body2, count2)
    return all(_compatible(a, b) for a, b in zip(types1, types2))


def _first_argument_names(argument_list: Node) -> Iterable[str]:
    """Yield, for each argument, the content of the first name in its expressions."""
    for argument in argument_list.children:
        if argument.name != "argument":
            continue
        found = next(
            (
                name.content()
                for expr in argument.children
                if expr.name == "expr"
                for name in expr.children
                if name.name == "name"
            ),
            None,
        )
        if found is not None:
            yield found


def extract_error_func_argument_type(node: Node) -> str:
    """Return the signature of a mis-parsed definition from its ``argument_list`` node."""
    if node.name != "argument_list":
        return VOID_SIGNATURE
    return _compose(list(_first_argument_names(node)))


def _parameter_types(parameter_list: Node) -> tuple[list[str], bool, bool]:
    parts: list[str] = []
    point_void = False
    point = False
    for parameter in parameter_list.children:
        if parameter.name != "parameter":
            continue
        value = _first_parameter_type(parameter)
        if value is None:
            continue
        type_node, name = value
        if not parts and _ieq(name, "void"):
            point_void = True
            sibling: Node | None = type_node
            while sibling is not None:
                if sibling.name == "name":
                    point = True
                    break
                sibling = sibling.next
        parts.append(name)
    return parts, point_void, point


def _first_parameter_type(parameter: Node) -> tuple[Node, str] | None:
    for decl in parameter.children:
        if decl.name != "decl":
            continue
        for type_node in decl.children:
            if type_node.name != "type":
                continue
            for name in type_node.children:
                if name.name == "name":
                    return type_node, name.content()
    return None


def extract_func_argument_type(node: Node) -> str:
    """Return the signature of a function definition node.

    ``f(int a, const char *s)`` gives ``(int/char#2)``; ``f(void)`` gives
    ``(void#0)`` while ``f(void *p)`` gives ``(void#1)``.
    """
    parts: list[str] = []
    point_void = False
    point = False
    for child in node.children:
        if child.name == "parameter_list":
            parts, point_void, point = _parameter_types(child)
            break
        if child.name == "argument_list":
            parts = list(_first_argument_names(child))
            break
    return _compose(parts, force_zero=point_void and not point)


def _lookup_type(var_types: Iterable[VarType], name: str) -> str | None:
    for var in var_types:
        if _ieq(var.var_name, name):
            return var.type
    return None


def get_called_func_argument_type(
    node: Node, func_def_var_types: Iterable[VarType] | None
) -> str:
    """Return the signature of a call node from the types of the variables passed.

    Arguments that are not plain variables, or whose variable is not among
    ``func_def_var_types``, are recorded as ``non``.
    """
    var_types = list(func_def_var_types or [])
    parts: list[str] = []
    for argument_list in node.children:
        if argument_list.name != "argument_list":
            continue
        for argument in argument_list.children:
            if argument.name != "argument":
                continue
            expr = next((e for e in argument.children if e.name == "expr"), None)
            if expr is None:
                continue
            last = expr.last
            found = None
            if last is not None and last.name == "name":
                found = _lookup_type(var_types, last.content())
            parts.append(found if found is not None else UNKNOWN_TYPE)
        break
    return _compose(parts)