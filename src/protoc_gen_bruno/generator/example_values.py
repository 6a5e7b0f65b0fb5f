from __future__ import annotations

from typing import Dict

from protoc_gen_bruno.models import DescriptorError, Field, Message

# Nesting ceiling for example payloads; recursive messages stop here.
MAX_DEPTH = 3

INDENT = "  "

INTEGER_KINDS = {
    "int32", "sint32", "sfixed32", "uint32", "fixed32",
    "int64", "sint64", "sfixed64", "uint64", "fixed64",
}

# Proto scalar kind -> example literal (strings and enums are handled apart)
SCALAR_EXAMPLES: Dict[str, str] = {
    **{kind: "0" for kind in INTEGER_KINDS},
    "bool": "false",
    "float": "0.0",
    "double": "0.0",
    "bytes": '"base64_encoded_data"',
}

# Well-known types use their canonical JSON mapping instead of an object.
WELL_KNOWN_EXAMPLES: Dict[str, str] = {
    "google.protobuf.Timestamp": '"2024-01-01T00:00:00Z"',
    "google.protobuf.Duration": '"1.5s"',
    "google.protobuf.Any": '{"@type": "type.googleapis.com/example.Type", "value": "..."}',
    "google.protobuf.FieldMask": '"field1,field2.subfield"',
    "google.protobuf.Struct": "{}",
    "google.protobuf.Value": "null",
    "google.protobuf.ListValue": "[]",
    "google.protobuf.Empty": "{}",
}


def example_json(message: Message, depth: int = 1) -> str:
    """Build an example JSON object for a message.

    The opening brace is left unindented so it can follow a key on the same
    line; fields sit one level deeper than ``depth`` and the closing brace
    at ``depth``. Beyond MAX_DEPTH an empty object is returned.
    """
    if depth > MAX_DEPTH:
        return "{}"

    field_indent = INDENT * (depth + 1)
    lines = ["{"]
    last = len(message.fields) - 1
    for i, field in enumerate(message.fields):
        value = field_value(field, depth + 1)
        if field.is_repeated:
            value = f"[{value}]"
        line = f'{field_indent}"{field.json_name}": {value}'
        if i < last:
            line += ","
        lines.append(line)
    lines.append(INDENT * depth + "}")
    return "\n".join(lines)


def field_value(field: Field, depth: int) -> str:
    """Example literal for a single (non-repeated) value of a field."""
    kind = field.kind
    if kind == "string":
        return f'"example_{field.json_name}"'
    if kind in SCALAR_EXAMPLES:
        return SCALAR_EXAMPLES[kind]
    if kind == "enum":
        if field.enum is not None and field.enum.values:
            return f'"{field.enum.values[0]}"'
        return '"ENUM_VALUE"'
    if kind == "message":
        if field.message is None:
            raise DescriptorError(
                f"Field '{field.name}' is a message but its type was not resolved"
            )
        well_known = WELL_KNOWN_EXAMPLES.get(field.message.full_name)
        if well_known is not None:
            return well_known
        return example_json(field.message, depth)
    return '"unknown"'
