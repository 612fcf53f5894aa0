"""Context discovery: symbols, scope, definitions, references and regions.

Pipeline: extract_symbols() -> resolve_scope() -> find_definition_files()
[-> find_referencing_files()] -> filter_regions()
"""

from todo_assist.context.definitions import find_definition_files
from todo_assist.context.references import enclosing_symbol, find_referencing_files
from todo_assist.context.regions import filter_regions, filter_with_context
from todo_assist.context.scope import resolve_scope
from todo_assist.context.symbols import (
    LexicalSymbolExtractor,
    SymbolExtractor,
    extract_symbols,
    extract_targeted_symbols,
)

__all__ = [
    "LexicalSymbolExtractor",
    "SymbolExtractor",
    "enclosing_symbol",
    "extract_symbols",
    "extract_targeted_symbols",
    "filter_regions",
    "filter_with_context",
    "find_definition_files",
    "find_referencing_files",
    "resolve_scope",
]
