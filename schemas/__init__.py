"""
Pydantic schemas for run options and input source identity.

Modules:
    options: Validated options of one loading run (LoadOptions)
    struct: Input source description and its stable source key (InputStruct)

Usage:
    from schemas.options import LoadOptions
    from schemas.struct import InputStruct

Example:
    options = LoadOptions.parse(file="struct.json", graph="hugegraph")
    struct = InputStruct(category="vertex", label="person", path="person.csv")
    key = struct.unique_key_for_file()
"""

__all__ = [
    "LoadOptions",
    "InputStruct",
]
