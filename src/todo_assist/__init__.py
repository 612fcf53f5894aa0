"""todo-assist: build a budgeted AI prompt from a single ``// TODO: -`` instruction.

Pipeline: locate_instruction() -> extract symbols -> resolve_scope()
-> find_definition_files() -> assemble_bundle()
"""

__version__ = "0.1.0"
