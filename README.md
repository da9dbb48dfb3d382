# confscope

confscope reads srcML documents, which are XML renderings of C and C++ source files. It answers one question: when a program reads a configuration variable, which called functions, variables and loops does that variable reach?

confscope is a library. It has no command-line entry point and uses only the standard library.

## Modules

### `confscope.srcml`: documents and basic queries

- `parse_xml(text)` parses srcML text into a `Node` tree.
  - Blank text that XML treats as ignorable is dropped.
  - Character data becomes child nodes named `text`.
  - Namespaces are removed from element and attribute names.
- `load_document(path)` reads a file and parses it.
- Both functions raise `XmlDocumentError` when the document is missing, empty or not well formed.
- `Node` has these members:
  - `name`, `attrs`, `children`, `parent`
  - `first`, `last`, `next`, `prev`
  - `content()`, which returns the concatenated text
  - `get(attr)`
- The module also provides these helpers:
  - `get_line`
  - `judge_var_used`
  - `judge_exist_child_node`
  - `get_func_name`
  - `get_speci_called_func_node`
  - `get_argu_position`
  - `get_para_name_by_index_from_para_list`
  - `source_path_from_xml`, which strips a leading `temp_` and a trailing `.xml` from a path

### `confscope.signature`: argument-type signatures

A signature has the form `(type1/type2#count)`. A function that takes no arguments has the signature `(void#0)`. An argument whose type is unknown is written `non`.

- `extract_func_argument_type`
- `extract_error_func_argument_type`, for definitions that the converter mis-parsed as declarations
- `get_called_func_argument_type`
- `judge_argument_similar`

### `confscope.variables`: declared variables

These functions return lists of `VarType`:

- `extract_var_def`
- `extract_var_type`
- `extract_error_var_type`
- `extract_global_var_def`, which also prints the definitions it finds

### `confscope.influence`: data flow

- `extract_direct_influ_var` returns the variables that one variable flows into through assignments and initialisers. Each result is a `VarDef`.
- `slice_infl_var` follows that flow transitively.
- `scan_assign_var` prints and returns the assigned variables under a node.
- `scan_back_assign_var` does the same after a node and after each node that encloses it, up to the enclosing function.

### `confscope.slicing`: whole files

- `slice_file` runs a slice function that you supply over every function in a document, then `slice_from_node`, then `slice_error_from_node`.
- The slice function is called as `f(var_def, block, var_types, siblings)`.
- The results are `FuncCallInfo` records.
- `slice_from_node` raises `ValueError` when an affected function has no usable name.

### `confscope.lookup`: one function at a time

These functions find a definition by name and signature, then report on it:

- `get_para_name_by_index`
- `get_var_influ_func`
- `get_var_influ_var_info`
- `get_called_func_loop_info`, which returns `LoopExpr` records
- `get_called_func_loop_count_info`, which returns `LoopCountInfo` records

The `*_from_node` variants take a node instead of a path.

A name that matches but whose signature does not is logged as a warning through `logging` and skipped. `LoopType` tells `for`, `while` and `do` loops apart.

## Example

```python
from confscope.srcml import load_document
from confscope.signature import extract_func_argument_type

root = load_document("temp_prog/src/main.c.xml")
for node in root.children:
    if node.name == "function":
        print(extract_func_argument_type(node))
```

## What confscope does not do

- **No conversion.** confscope does not convert C or C++ sources to srcML. It expects existing srcML files.
- **No storage.** It keeps no record of which functions are defined where. When signatures are compared, the number of known definitions of a function comes from the caller, through the `definition_count` argument. That argument is an integer or a callable.
- **No C/C++ classification.** Whether a file is a C source comes from the caller, through `is_c_source`.
- **No per-language rules.** Which calls a variable affects is decided by the slice function the caller passes in.
- **No scoring.** confscope does not score resources.
- **No command-line tool.**

## Running the tests

```
pip install -e .[test]
pytest
```