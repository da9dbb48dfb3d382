"""Slicing of whole functions: which called functions a variable reaches.

A slice function is supplied by the caller. It is called as
``var_slice_func(var_def, block, var_types, siblings)`` and returns the
called functions (``FuncInfo``) that ``var_def`` directly affects within
``block``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List, Optional

from confscope.influence import slice_infl_var
from confscope.signature import (
    extract_error_func_argument_type,
    extract_func_argument_type,
)
from confscope.srcml import (
    FuncCallInfo,
    FuncInfo,
    Node,
    VarDef,
    VarType,
    _ieq,
    _walk,
    get_func_name,
    load_document,
    source_path_from_xml,
)
from confscope.variables import extract_error_var_type, extract_var_type

VarSliceFunc = Callable[[VarDef, Optional[Node], List[VarType], bool], Iterable[FuncInfo]]


def _is_function_like(cur: Node) -> bool:
    if cur.name == "function":
        return True
    last = cur.last
    if cur.name == "extern" and last is not None and last.name == "function":
        return True
    parent = cur.parent
    return (
        parent is not None
        and parent.name == "block"
        and cur.name == "decl_stmt"
        and last is not None
        and last.name == "decl"
    )


def _first_child_named(node: Node, name: str) -> Node | None:
    return next((child for child in node.children if child.name == name), None)


def _same_call(a: FuncInfo, b: FuncInfo) -> bool:
    return _ieq(a.func_name, b.func_name) and a.called_line == b.called_line


def _slice_function(
    var_name: str, func_node: Node, var_slice_func: VarSliceFunc
) -> list[FuncInfo]:
    """Collect the calls affected by ``var_name`` and the variables it influences."""
    var_types = extract_var_type(func_node)
    block = _first_child_named(func_node, "block")
    found = list(var_slice_func(VarDef(var_name), block, var_types, True))
    for influenced in slice_infl_var(var_name, block, var_types):
        current = list(var_slice_func(influenced, block, var_types, True))
        known = list(found)
        found.extend(
            info for info in current if not any(_same_call(old, info) for old in known)
        )
    return found


def slice_error_from_node(
    var_name: str, xml_path: str, node: Node | None, var_slice_func: VarSliceFunc
) -> list[FuncCallInfo]:
    """Slice definitions that the converter mis-parsed as declarations.

    Such a definition appears as a ``decl`` holding a name, an
    ``argument_list`` of parameters and a later ``argument_list`` standing
    for the body.
    """
    result: list[FuncCallInfo] = []
    source = source_path_from_xml(xml_path)
    for cur in _walk(node, True):
        if cur.name != "decl":
            continue
        for part in cur.children:
            params = part.next
            if part.name != "name" or params is None or params.name != "argument_list":
                continue
            func_name = part.content()
            if _ieq(func_name, "__attribute__"):
                break
            var_types = extract_error_var_type(params)
            block = next(
                (n for n in _walk(params.next, True) if n.name == "argument_list"), None
            )
            found = list(var_slice_func(VarDef(var_name), block, var_types, True))
            if found:
                result.append(
                    FuncCallInfo(
                        func_name,
                        source,
                        extract_error_func_argument_type(params),
                        found,
                    )
                )
    return result


def slice_from_node(
    var_name: str, xml_path: str, node: Node | None, var_slice_func: VarSliceFunc
) -> list[FuncCallInfo]:
    """Slice every function among the node and its following siblings.

    Returns one entry per function in which ``var_name``, directly or through
    the variables it influences, reaches at least one called function.
    ``extern "C"`` blocks are searched as well.

    Raises ValueError when an affected function has no usable name.
    """
    result: list[FuncCallInfo] = []
    source = source_path_from_xml(xml_path)
    for cur in _walk(node, True):
        if _is_function_like(cur):
            func_node = cur if cur.name == "function" else cur.last
            found = _slice_function(var_name, func_node, var_slice_func)
            if not found:
                continue
            func_name = get_func_name(func_node.first)
            if func_name is None:
                raise ValueError("get function name or line error!")
            result.append(
                FuncCallInfo(
                    func_name, source, extract_func_argument_type(func_node), found
                )
            )
        elif cur.name == "extern" and cur.children:
            for child in cur.children:
                if child.name == "block":
                    result.extend(
                        slice_from_node(var_name, xml_path, child.first, var_slice_func)
                    )
                elif child.name == "decl_stmt":
                    result.extend(
                        slice_error_from_node(
                            var_name, xml_path, child.first, var_slice_func
                        )
                    )
    return result


def slice_file(
    var_name: str, xml_path: str | Path, var_slice_func: VarSliceFunc
) -> list[FuncCallInfo]:
    """Load a srcML file and slice all of its top-level functions."""
    root = load_document(xml_path)
    return slice_from_node(var_name, str(xml_path), root.first, var_slice_func)