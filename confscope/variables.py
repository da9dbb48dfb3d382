"""Extraction of variable declarations and their types from srcML trees."""

from __future__ import annotations

from pathlib import Path

from confscope.srcml import Node, VarType, _to_int, _walk, get_line, load_document


def _keep_named(entries: list[VarType]) -> list[VarType]:
    """Drop entries that never received a variable name."""
    return [entry for entry in entries if entry.var_name]


def _name_text(name: Node) -> str:
    """Return the text of a declared name, looking through a nested name."""
    inner = name.first
    if inner is None or inner.name == "text":
        return name.content()
    return inner.content()


def _following_name(decl: Node) -> Node | None:
    """Return the first ``name`` after the first child of a declaration."""
    start = decl.first.next if decl.first is not None else None
    for sibling in _walk(start, True):
        if sibling.name == "name":
            return sibling
    return None


def _first_decl_def(decl: Node, entry: VarType, base: str, line: int) -> str:
    """Fill ``entry`` from the first declaration of a statement and return the base type."""
    for part in decl.children:
        if part.name == "specifier":
            base += part.content()
        elif part.name == "type":
            label = True
            for piece in part.children:
                if piece.name == "name":
                    first = piece.first
                    if first is not None and first.name == "text":
                        if base:
                            base += " "
                        base += piece.content()
                    else:
                        for sub in piece.children:
                            if base:
                                base += " "
                            base += sub.content()
                elif piece.name == "modifier":
                    if label:
                        entry.type += base + " "
                        label = False
                    entry.type += piece.content()
        elif part.name == "name":
            entry.var_name += _name_text(part)
            entry.line = line
            if not entry.type:
                entry.type += base
    return base


def _modified_decl_name(decl: Node) -> str:
    first = decl.first
    if first is not None and first.name == "text":
        return decl.content()
    for sub in decl.children:
        if sub.name == "name":
            inner = sub.first
            if inner is not None and inner.name == "text":
                return sub.content()
            if inner is not None and inner.name == "name":
                return inner.content()
            return ""
    return ""


def _var_defs_from_stmt(stmt: Node) -> list[VarType]:
    entry = VarType("")
    entries = [entry]
    line = get_line(stmt.last) or 0
    base = ""
    child = stmt.first
    while child is not None:
        if child.name == "decl":
            if child.prev is None:
                base = _first_decl_def(child, entry, base, line)
            else:
                entry = VarType("", base, line)
                entries.append(entry)
                name = _following_name(child)
                if name is not None:
                    entry.var_name += _name_text(name)
        elif child.name not in ("text", "position"):
            # a declarator such as "*p" following the first declaration
            entry = VarType("")
            entries.append(entry)
            label = True
            while child is not None:
                if child.name == "modifier":
                    if label:
                        entry.type += base + " "
                        label = False
                    entry.type += child.content()
                    entry.line = line
                elif child.name == "decl":
                    entry.var_name += _modified_decl_name(child)
                    break
                child = child.next
            if child is None:
                break
        child = child.next
    return entries


def extract_var_def(node: Node | None, siblings: bool = False) -> list[VarType]:
    """Collect variable definitions with full type text, modifiers included.

    ``static struct stu *a, b;`` yields ``a`` typed ``static struct stu *`` and
    ``b`` typed ``static struct stu``. The line of each entry is the first line
    found in the last child of its declaration statement.
    """
    found: list[VarType] = []
    for cur in _walk(node, siblings):
        if cur.name == "decl_stmt":
            found.extend(_var_defs_from_stmt(cur))
        else:
            found.extend(extract_var_def(cur.first, True))
    return _keep_named(found)


def _error_var_from_argument(argument: Node) -> VarType | None:
    for expr in argument.children:
        if expr.name != "expr":
            continue
        for part in expr.children:
            if part.name == "text":
                continue
            if part.name != "name":
                break
            for following in _walk(part.next, True):
                if following.name == "name":
                    return VarType(
                        following.content(),
                        part.content(),
                        get_line(expr) or 0,
                    )
    return None


def extract_error_var_type(node: Node | None, siblings: bool = False) -> list[VarType]:
    """Collect declarations from a mis-parsed definition's argument expressions.

    An argument written as ``Type name`` is read as a variable ``name`` of
    type ``Type``.
    """
    found: list[VarType] = []
    for cur in _walk(node, siblings):
        if cur.name == "argument":
            entry = _error_var_from_argument(cur)
            if entry is not None:
                found.append(entry)
        else:
            found.extend(extract_error_var_type(cur.first, True))
    return _keep_named(found)


def _var_types_from_stmt(stmt: Node) -> list[VarType]:
    entry = VarType("")
    entries = [entry]
    base = ""
    for child in stmt.children:
        if child.name != "decl":
            continue
        if child.prev is None:
            for part in child.children:
                if part.name == "specifier":
                    base += part.content()
                elif part.name == "type":
                    for piece in part.children:
                        if piece.name != "name":
                            continue
                        first = piece.first
                        if first is not None and first.name == "text":
                            base += piece.content()
                        else:
                            for sub in piece.children:
                                if base:
                                    base += " "
                                base += sub.content()
                        break
                elif part.name == "name":
                    first = part.first
                    source = first if first is not None and first.name != "text" else part
                    entry.var_name += source.content()
                    entry.line = _to_int(source.get("line"))
                    entry.type += base
        else:
            entry = VarType("", base)
            entries.append(entry)
            start = child.first.next if child.first is not None else None
            name = _following_name(child)
            inner = name.first if name is not None else None
            if inner is not None:
                source = name if inner.name == "text" else inner
            else:
                source = start
            if source is not None:
                entry.var_name += source.content()
                entry.line = _to_int(source.get("line"))
    return entries


def extract_var_type(node: Node | None, siblings: bool = False) -> list[VarType]:
    """Collect declared variables and parameters with their base types.

    Modifiers are not part of the type; each entry carries the line of its
    name.
    """
    found: list[VarType] = []
    for cur in _walk(node, siblings):
        if cur.name in ("decl_stmt", "parameter"):
            found.extend(_var_types_from_stmt(cur))
        else:
            found.extend(extract_var_type(cur.first, True))
    return _keep_named(found)


def extract_global_var_def(path: str | Path) -> list[VarType]:
    """Print and return the definitions made by top-level declaration statements."""
    root = load_document(path)
    result: list[VarType] = []
    for child in root.children:
        if child.name != "decl_stmt":
            continue
        print("global variable define info: ")
        definitions = extract_var_def(child)
        for definition in definitions:
            print(f"{definition.type} {definition.var_name}({definition.line})")
        result.extend(definitions)
    return result