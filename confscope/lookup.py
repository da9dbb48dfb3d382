"""Queries that locate one function definition by name and signature and inspect it.

A definition matches when its name equals the requested name (ignoring
case) and its argument signature is similar to the requested one, as
decided by ``judge_argument_similar``. A definition whose name matches but
whose signature does not is reported as a warning and skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Union

from confscope.influence import slice_infl_var
from confscope.signature import (
    DefinitionCount,
    extract_error_func_argument_type,
    extract_func_argument_type,
    judge_argument_similar,
)
from confscope.slicing import _is_function_like
from confscope.srcml import (
    DirectInflFunc,
    LoopCountInfo,
    LoopExpr,
    LoopType,
    Node,
    VarDef,
    VarType,
    _ieq,
    _to_int,
    _walk,
    get_para_name_by_index_from_para_list,
    get_speci_called_func_node,
    load_document,
    source_path_from_xml,
)
from confscope.variables import extract_error_var_type, extract_var_type

_log = logging.getLogger(__name__)

DirectInflFuncType = Callable[
    [str, Optional[Node], Optional[List[VarType]], bool], Iterable[DirectInflFunc]
]
CSourceFlag = Union[bool, Callable[[str], bool]]


def _signature_matches(
    func_name: str,
    xml_path: str,
    signature: str,
    func_argument_type: str,
    definition_count: DefinitionCount,
) -> bool:
    source = source_path_from_xml(xml_path)
    if judge_argument_similar(
        func_name, source, signature, func_argument_type, definition_count
    ):
        return True
    _log.warning("%s: function: %s has more than one define!", xml_path, func_name)
    return False


def _function_node(cur: Node) -> Node:
    return cur if cur.name == "function" else cur.last


def _matching_function_names(
    func_node: Node,
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    definition_count: DefinitionCount,
) -> Iterator[Node]:
    """Yield the name nodes of ``func_node`` that denote the requested definition."""
    for part in func_node.children:
        if part.name != "name" or not _ieq(func_name, part.content()):
            continue
        signature = extract_func_argument_type(func_node)
        if _signature_matches(
            func_name, xml_path, signature, func_argument_type, definition_count
        ):
            yield part


def _matching_error_definitions(
    node: Optional[Node],
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    definition_count: DefinitionCount,
) -> Iterator[Node]:
    """Yield the name nodes of mis-parsed definitions that match the request.

    The search ends at the first ``__attribute__`` pseudo-definition.
    """
    for cur in _walk(node, True):
        if cur.name != "decl":
            continue
        for part in cur.children:
            params = part.next
            if part.name != "name" or params is None or params.name != "argument_list":
                continue
            value = part.content()
            if _ieq(value, "__attribute__"):
                return
            if not _ieq(func_name, value):
                continue
            signature = extract_error_func_argument_type(params)
            if _signature_matches(
                func_name, xml_path, signature, func_argument_type, definition_count
            ):
                yield part


def _find_list(start: Optional[Node]) -> Optional[Node]:
    for sibling in _walk(start, True):
        if sibling.name in ("parameter_list", "argument_list"):
            return sibling
    return None


def _para_name_after(name_node: Node, index: int) -> Optional[str]:
    para_list = _find_list(name_node)
    if para_list is None:
        return None
    return get_para_name_by_index_from_para_list(para_list, index)


def _resolve_c_source(is_c_source: CSourceFlag, xml_path: str) -> bool:
    return is_c_source(xml_path) if callable(is_c_source) else bool(is_c_source)


def get_error_para_name_by_index_from_node(
    node: Optional[Node],
    index: int,
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    definition_count: DefinitionCount = None,
) -> Optional[str]:
    """Return the name of parameter ``index`` of a mis-parsed definition, or None."""
    for name_node in _matching_error_definitions(
        node, func_name, xml_path, func_argument_type, definition_count
    ):
        found = _para_name_after(name_node, index)
        if found is not None:
            return found
    return None


def get_para_name_by_index_from_node(
    node: Optional[Node],
    index: int,
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    definition_count: DefinitionCount = None,
) -> Optional[str]:
    """Return the name of parameter ``index`` of the matching definition, or None.

    Functions inside ``extern "C"`` blocks are searched as well. A variadic
    position such as ``...`` has no name and gives None.
    """
    for cur in _walk(node, True):
        if _is_function_like(cur):
            func_node = _function_node(cur)
            for name_node in _matching_function_names(
                func_node, func_name, xml_path, func_argument_type, definition_count
            ):
                found = _para_name_after(name_node, index)
                if found is not None:
                    return found
        elif cur.name == "extern" and cur.children:
            for child in cur.children:
                found = None
                if child.name == "block":
                    found = get_para_name_by_index_from_node(
                        child.first, index, func_name, xml_path,
                        func_argument_type, definition_count,
                    )
                elif child.name == "decl_stmt":
                    found = get_error_para_name_by_index_from_node(
                        child.first, index, func_name, xml_path,
                        func_argument_type, definition_count,
                    )
                if found is not None:
                    return found
    return None


def get_para_name_by_index(
    index: int,
    func_name: str,
    xml_path: Union[str, Path],
    func_argument_type: str,
    definition_count: DefinitionCount = None,
) -> Optional[str]:
    """Load a srcML file and return the name of parameter ``index`` of a function."""
    root = load_document(xml_path)
    return get_para_name_by_index_from_node(
        root.first, index, func_name, str(xml_path), func_argument_type, definition_count
    )


def get_error_var_influ_func_from_node(
    node: Optional[Node],
    var_name: str,
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    direct_infl_func: DirectInflFuncType,
    definition_count: DefinitionCount = None,
    is_c_source: CSourceFlag = False,
) -> list[DirectInflFunc]:
    """Return the calls ``var_name`` directly affects in a mis-parsed definition.

    The variable types handed to ``direct_infl_func`` are those declared in
    the parameters and the body; for C sources None is handed instead.
    """
    for name_node in _matching_error_definitions(
        node, func_name, xml_path, func_argument_type, definition_count
    ):
        params = name_node.next
        var_types = extract_error_var_type(params)
        block = next(
            (n for n in _walk(params.next, True) if n.name == "argument_list"), None
        )
        var_types.extend(extract_error_var_type(block))
        types = None if _resolve_c_source(is_c_source, xml_path) else var_types
        return list(direct_infl_func(var_name, block, types, True))
    return []


def get_var_influ_func_from_node(
    node: Optional[Node],
    var_name: str,
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    direct_infl_func: DirectInflFuncType,
    definition_count: DefinitionCount = None,
    is_c_source: CSourceFlag = False,
) -> list[DirectInflFunc]:
    """Return the calls affected by ``var_name`` in the matching definition.

    Calls reached through the variables ``var_name`` influences are included,
    after those it reaches directly.
    """
    c_source = _resolve_c_source(is_c_source, xml_path)
    for cur in _walk(node, True):
        if _is_function_like(cur):
            func_node = _function_node(cur)
            for _ in _matching_function_names(
                func_node, func_name, xml_path, func_argument_type, definition_count
            ):
                var_types = extract_var_type(func_node)
                block = next((c for c in func_node.children if c.name == "block"), None)
                types = None if c_source else var_types
                found = list(direct_infl_func(var_name, block, types, True))
                for influenced in slice_infl_var(var_name, block, var_types):
                    found.extend(direct_infl_func(influenced.var_name, block, types, True))
                return found
        elif cur.name == "extern" and cur.children:
            for child in cur.children:
                found: list[DirectInflFunc] = []
                if child.name == "block":
                    found = get_var_influ_func_from_node(
                        child.first, var_name, func_name, xml_path, func_argument_type,
                        direct_infl_func, definition_count, is_c_source,
                    )
                elif child.name == "decl_stmt":
                    found = get_error_var_influ_func_from_node(
                        child.first, var_name, func_name, xml_path, func_argument_type,
                        direct_infl_func, definition_count, is_c_source,
                    )
                if found:
                    return found
    return []


def get_var_influ_func(
    var_name: str,
    func_name: str,
    xml_path: Union[str, Path],
    func_argument_type: str,
    direct_infl_func: DirectInflFuncType,
    definition_count: DefinitionCount = None,
    is_c_source: CSourceFlag = False,
) -> list[DirectInflFunc]:
    """Load a srcML file and return the calls ``var_name`` affects in a function."""
    root = load_document(xml_path)
    return get_var_influ_func_from_node(
        root.first, var_name, func_name, str(xml_path), func_argument_type,
        direct_infl_func, definition_count, is_c_source,
    )


def _is_top_function(cur: Node) -> bool:
    if cur.name == "function":
        return True
    last = cur.last
    if last is None:
        return False
    return (cur.name == "extern" and last.name == "function") or (
        cur.name == "decl_stmt" and last.name == "decl"
    )


def _top_level_matches(
    root: Node,
    func_name: str,
    xml_path: str,
    func_argument_type: str,
    definition_count: DefinitionCount,
) -> Iterator[Node]:
    """Yield each top-level definition node that matches, once per matching name."""
    for cur in root.children:
        if not _is_top_function(cur):
            continue
        func_node = _function_node(cur)
        for _ in _matching_function_names(
            func_node, func_name, xml_path, func_argument_type, definition_count
        ):
            yield func_node


def get_var_influ_var_info(
    var_name: str,
    func_name: str,
    xml_path: Union[str, Path],
    func_argument_type: str,
    definition_count: DefinitionCount = None,
) -> list[VarDef]:
    """Return the variables ``var_name`` influences in a top-level function.

    When several definitions match, the last one decides the result.
    """
    root = load_document(xml_path)
    result: list[VarDef] = []
    for func_node in _top_level_matches(
        root, func_name, str(xml_path), func_argument_type, definition_count
    ):
        result = slice_infl_var(var_name, func_node, extract_var_type(func_node))
    return result


def _ancestors(node: Node) -> Iterator[Node]:
    parent = node.parent
    while parent is not None:
        yield parent
        parent = parent.parent


def _loop_expr(node: Node) -> Optional[LoopExpr]:
    kinds = {
        "for": ("control", LoopType.FOR),
        "while": ("condition", LoopType.WHILE),
        "do": ("condition", LoopType.DO_WHILE),
    }
    if node.name not in kinds:
        return None
    part_name, loop_type = kinds[node.name]
    part = next((c for c in node.children if c.name == part_name), None)
    if part is None:
        return None
    return LoopExpr(loop_type, part.content())


def get_called_func_loop_info(
    func_name: str,
    xml_path: Union[str, Path],
    func_argument_type: str,
    called_func_name: str,
    called_line: int,
    definition_count: DefinitionCount = None,
) -> list[LoopExpr]:
    """Return the loops enclosing a call, innermost first.

    The call is identified by the called function's name and its line within
    the calling function ``func_name``.
    """
    root = load_document(xml_path)
    result: list[LoopExpr] = []
    for func_node in _top_level_matches(
        root, func_name, str(xml_path), func_argument_type, definition_count
    ):
        call = get_speci_called_func_node(func_node, called_func_name, called_line)
        if call is None:
            continue
        for ancestor in _ancestors(call):
            loop = _loop_expr(ancestor)
            if loop is not None:
                result.append(loop)
    return result


def _count_index(text: str) -> int:
    # "count3++;" records its loop in the variable count3
    return _to_int(text[5 : 5 + max(len(text) - 7, 0)])


def _count_in(nodes: Iterable[Node], skipped: str) -> Optional[int]:
    for node in nodes:
        if node.name == skipped:
            continue
        text = node.content()
        if "count" in text and "++" in text:
            return _count_index(text)
    return None


def _loop_count(node: Node) -> Optional[tuple[LoopType, int]]:
    if node.name in ("for", "do"):
        loop_type = LoopType.FOR if node.name == "for" else LoopType.DO_WHILE
        for child in node.children:
            if child.name == "block":
                found = _count_in(reversed(child.children), "text")
                if found is not None:
                    return loop_type, found
    elif node.name == "while":
        for child in node.children:
            if child.name == "condition":
                found = _count_in(reversed(child.children), "block")
                if found is not None:
                    return LoopType.WHILE, found
    return None


def get_called_func_loop_count_info(
    func_name: str,
    xml_path: Union[str, Path],
    func_argument_type: str,
    called_func_name: str,
    called_line: int,
    definition_count: DefinitionCount = None,
) -> list[LoopCountInfo]:
    """Return the loop counters recorded around a call, innermost first.

    A ``for`` or ``do`` loop is counted by a ``countN++`` statement in its
    body, a ``while`` loop by one in its condition.
    """
    path = str(xml_path)
    root = load_document(xml_path)
    source_path = path[:-4] if len(path) >= 4 else ""
    result: list[LoopCountInfo] = []
    for func_node in _top_level_matches(
        root, func_name, path, func_argument_type, definition_count
    ):
        call = get_speci_called_func_node(func_node, called_func_name, called_line)
        if call is None:
            continue
        for ancestor in _ancestors(call):
            found = _loop_count(ancestor)
            if found is None or found[1] == -1:
                continue
            loop_type, count = found
            result.append(LoopCountInfo(count, loop_type, func_name, source_path))
    return result