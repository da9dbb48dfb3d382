"""Tree model for srcML documents and the basic queries the analyses build on."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Iterator

_XML_BLANKS = " \t\n\r"


class XmlDocumentError(Exception):
    """Raised when a srcML document cannot be read or parsed."""


class Node:
    """An element or text node of a parsed srcML document.

    Element names and attribute names are stored without their namespace.
    Character data appears as child nodes named ``text``.
    """

    __slots__ = ("name", "attrs", "children", "parent", "text", "_index")

    def __init__(
        self,
        name: str,
        attrs: dict[str, str] | None = None,
        children: list[Node] | None = None,
        text: str | None = None,
    ) -> None:
        self.name = name
        self.attrs = dict(attrs or {})
        self.text = text
        self.parent: Node | None = None
        self._index = 0
        self.children: list[Node] = []
        for child in children or []:
            self._append(child)

    def _append(self, child: Node) -> None:
        child.parent = self
        child._index = len(self.children)
        self.children.append(child)

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def first(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def last(self) -> Node | None:
        return self.children[-1] if self.children else None

    @property
    def next(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = self._index + 1
        return siblings[index] if index < len(siblings) else None

    @property
    def prev(self) -> Node | None:
        if self.parent is None or self._index == 0:
            return None
        return self.parent.children[self._index - 1]

    def content(self) -> str:
        """Return the concatenated character data of this node and its descendants."""
        if self.text is not None:
            return self.text
        return "".join(child.content() for child in self.children)

    def get(self, attr: str) -> str | None:
        """Return the value of an attribute by its local name, or None."""
        return self.attrs.get(attr)

    def __repr__(self) -> str:
        if self.is_text:
            return f"Node(text={self.text!r})"
        return f"Node({self.name!r}, children={len(self.children)})"


@dataclass
class VarType:
    var_name: str
    type: str = ""
    line: int = 0


@dataclass
class VarDef:
    var_name: str
    is_global: bool = False
    line: int = 0


@dataclass
class FuncInfo:
    func_name: str
    func_type: str = "extern"
    argument_type: str = ""
    called_line: int = 0
    source_file: str = ""
    type: str = ""


@dataclass
class FuncCallInfo:
    func_name: str
    source_file: str
    func_argument_type: str
    called_func_info: list[FuncInfo] = field(default_factory=list)


@dataclass
class DirectInflFunc:
    index: int
    info: FuncInfo


class LoopType(IntEnum):
    FOR = 0
    WHILE = 1
    DO_WHILE = 2


@dataclass
class LoopExpr:
    type: LoopType
    expr: str


@dataclass
class LoopCountInfo:
    count: int
    type: LoopType
    func_name: str
    source_path: str


def _local(name: str) -> str:
    return name.rsplit("}", 1)[-1] if name.startswith("{") else name


def _is_blank(text: str) -> bool:
    return text.strip(_XML_BLANKS) == ""


def _convert(elem: ET.Element) -> Node:
    node = Node(_local(elem.tag), {_local(k): v for k, v in elem.attrib.items()})

    def add_text(text: str | None, closing: bool) -> None:
        if not text:
            return
        if _is_blank(text):
            kids = node.children
            keep = (not kids and closing) or (
                bool(kids) and (kids[-1].is_text or kids[0].is_text)
            )
            if not keep:
                return
        node._append(Node("text", text=text))

    elements = list(elem)
    add_text(elem.text, closing=not elements)
    for position, child in enumerate(elements):
        node._append(_convert(child))
        add_text(child.tail, closing=position == len(elements) - 1)
    return node


def parse_xml(text: str | bytes) -> Node:
    """Parse srcML text and return its root node, dropping ignorable blanks."""
    try:
        root = ET.fromstring(text)
    except (ET.ParseError, ValueError) as exc:
        raise XmlDocumentError(f"document not parsed successfully: {exc}") from exc
    return _convert(root)


def load_document(path: str | Path) -> Node:
    """Read and parse a srcML file, returning its root node."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise XmlDocumentError(f"Document({path}) not parsed successfully.") from exc
    if not data.strip():
        raise XmlDocumentError(f"empty document({path}).")
    try:
        return parse_xml(data)
    except XmlDocumentError as exc:
        raise XmlDocumentError(f"Document({path}) not parsed successfully.") from exc


def source_path_from_xml(xml_path: str) -> str:
    """Strip the leading ``temp_`` and trailing ``.xml`` from a converted file path."""
    return xml_path[5:-4] if len(xml_path) > 9 else ""


def _to_int(value: str | None) -> int:
    if value is None:
        return 0
    value = value.strip()
    sign = 1
    if value[:1] in "+-" and value:
        sign = -1 if value[0] == "-" else 1
        value = value[1:]
    digits = ""
    for char in value:
        if not char.isdigit():
            break
        digits += char
    return sign * int(digits) if digits else 0


def _walk(node: Node | None, siblings: bool) -> Iterator[Node]:
    while node is not None:
        yield node
        if not siblings:
            return
        node = node.next


def _ieq(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def get_line(node: Node | None) -> int | None:
    """Return the first line number found on the node or, depth first, its descendants."""
    if node is None:
        return None
    line = node.get("line")
    if line is not None:
        return _to_int(line)
    for child in node.children:
        found = get_line(child)
        if found is not None:
            return found
    return None


def judge_var_used(node: Node | None, var: str, siblings: bool = False) -> bool:
    """Tell whether ``var`` is used in an expression under the node."""
    for cur in _walk(node, siblings):
        if cur.name == "expr":
            if _ieq(cur.content(), var):
                return True
            for child in cur.children:
                if child.name != "name":
                    continue
                name = child.content()
                if _ieq(name, var):
                    return True
                if var in name and len(name) > len(var) and name[len(var)] == "[":
                    return True
        if judge_var_used(cur.first, var, True):
            return True
    return False


def judge_exist_child_node(node: Node | None, node_name: str, siblings: bool = False) -> bool:
    """Tell whether a node named ``node_name`` exists at or below the node."""
    for cur in _walk(node, siblings):
        if cur.name == node_name:
            return True
        if judge_exist_child_node(cur.first, node_name, True):
            return True
    return False


def get_func_name(node: Node | None) -> str | None:
    """Return the name found among the node and its following siblings."""
    for cur in _walk(node, True):
        if cur.name == "name":
            name = cur.content()
            return None if _ieq(name, "__attribute__") else name
    return None


def get_speci_called_func_node(
    node: Node | None, called_func_name: str, called_line: int
) -> Node | None:
    """Find the ``call`` node of a given function name on a given line."""
    for cur in _walk(node, True):
        head = cur.first
        if cur.name == "call" and head is not None and head.last is not None:
            line = _to_int(None) if get_line(head) is None else get_line(head)
            if head.last.name != "position":
                name = head.last.content()
            else:
                name = head.content()
            if _ieq(name, called_func_name) and line == called_line:
                return cur
        found = get_speci_called_func_node(cur.first, called_func_name, called_line)
        if found is not None:
            return found
    return None


def get_argu_position(para_name: str, node: Node) -> int:
    """Return the index of the first argument whose text contains ``para_name``, or -1."""
    if node.name != "argument_list":
        return -1
    arguments = (child for child in node.children if child.name == "argument")
    for position, argument in enumerate(arguments):
        if para_name in argument.content():
            return position
    return -1


def _parameter_name(parameter: Node) -> str | None:
    for decl in parameter.children:
        if decl.name == "decl":
            for name in decl.children:
                if name.name == "name":
                    return name.content()
    return None


def _argument_name(argument: Node) -> str | None:
    for expr in argument.children:
        if expr.name == "expr":
            for name in reversed(expr.children):
                if name.name == "name":
                    return name.content()
    return None


def get_para_name_by_index_from_para_list(node: Node, index: int) -> str | None:
    """Return the name of the parameter or argument at ``index`` in a list node."""
    if node.name not in ("parameter_list", "argument_list"):
        return None
    remaining = index
    for child in node.children:
        if child.name == "parameter":
            extract = _parameter_name
        elif child.name == "argument":
            extract = _argument_name
        else:
            continue
        current, remaining = remaining, remaining - 1
        if current == 0:
            name = extract(child)
            if name is not None:
                return name
    return None