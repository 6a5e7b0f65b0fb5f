"""Map FileDescriptorProtos (as handed to a protoc plugin) into the generator models."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from google.api import annotations_pb2
from google.protobuf import descriptor_pb2 as d2

from protoc_gen_bruno.models import (
    DescriptorError,
    EnumType,
    Field,
    HttpRule,
    Message,
    Method,
    ProtoFile,
    Service,
)

FDP = d2.FieldDescriptorProto

SCALAR_KINDS: Dict[int, str] = {
    FDP.TYPE_DOUBLE: "double",
    FDP.TYPE_FLOAT: "float",
    FDP.TYPE_INT64: "int64",
    FDP.TYPE_UINT64: "uint64",
    FDP.TYPE_INT32: "int32",
    FDP.TYPE_FIXED64: "fixed64",
    FDP.TYPE_FIXED32: "fixed32",
    FDP.TYPE_BOOL: "bool",
    FDP.TYPE_STRING: "string",
    FDP.TYPE_GROUP: "group",
    FDP.TYPE_MESSAGE: "message",
    FDP.TYPE_BYTES: "bytes",
    FDP.TYPE_UINT32: "uint32",
    FDP.TYPE_ENUM: "enum",
    FDP.TYPE_SFIXED32: "sfixed32",
    FDP.TYPE_SFIXED64: "sfixed64",
    FDP.TYPE_SINT32: "sint32",
    FDP.TYPE_SINT64: "sint64",
}


def to_json_name(name: str) -> str:
    """Default proto3 JSON name: drop underscores, upper-case the following letter."""
    out = []
    capitalize_next = False
    for ch in name:
        if ch == "_":
            capitalize_next = True
        elif capitalize_next:
            out.append(ch.upper())
            capitalize_next = False
        else:
            out.append(ch)
    return "".join(out)


def _qualify(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


class _TypeRegistry:
    """All messages and enums of a request, keyed by full name without leading dot."""

    def __init__(self) -> None:
        self.messages: Dict[str, Message] = {}
        self.message_protos: Dict[str, d2.DescriptorProto] = {}
        self.map_entries: set = set()
        self.enums: Dict[str, EnumType] = {}

    def register_file(self, file_proto: d2.FileDescriptorProto) -> None:
        for enum in file_proto.enum_type:
            self._register_enum(file_proto.package, enum)
        for msg in file_proto.message_type:
            self._register_message(file_proto.package, msg)

    def _register_enum(self, scope: str, enum: d2.EnumDescriptorProto) -> None:
        full_name = _qualify(scope, enum.name)
        self.enums[full_name] = EnumType(full_name=full_name, values=[v.name for v in enum.value])

    def _register_message(self, scope: str, msg: d2.DescriptorProto) -> None:
        full_name = _qualify(scope, msg.name)
        self.messages[full_name] = Message(full_name=full_name)
        self.message_protos[full_name] = msg
        if msg.options.map_entry:
            self.map_entries.add(full_name)
        for enum in msg.enum_type:
            self._register_enum(full_name, enum)
        for nested in msg.nested_type:
            self._register_message(full_name, nested)

    def resolve_fields(self) -> None:
        """Second pass: fill message fields once every type is known."""
        for full_name, msg_proto in self.message_protos.items():
            self.messages[full_name].fields = [
                self._build_field(full_name, f) for f in msg_proto.field
            ]

    def message(self, type_name: str, referrer: str) -> Message:
        msg = self.messages.get(type_name.lstrip("."))
        if msg is None:
            raise DescriptorError(f"Unknown message type '{type_name}' referenced by '{referrer}'")
        return msg

    def _build_field(self, owner: str, fd: d2.FieldDescriptorProto) -> Field:
        kind = SCALAR_KINDS.get(fd.type, "unknown")
        type_name = fd.type_name.lstrip(".")
        referrer = f"{owner}.{fd.name}"

        message: Optional[Message] = None
        enum: Optional[EnumType] = None
        if kind == "message":
            message = self.message(type_name, referrer)
        elif kind == "enum":
            enum = self.enums.get(type_name)
            if enum is None:
                raise DescriptorError(f"Unknown enum type '{fd.type_name}' referenced by '{referrer}'")

        # Map fields are repeated entries on the wire but objects in JSON
        is_map = kind == "message" and type_name in self.map_entries
        return Field(
            name=fd.name,
            json_name=fd.json_name or to_json_name(fd.name),
            kind=kind,
            is_repeated=fd.label == FDP.LABEL_REPEATED and not is_map,
            message=message,
            enum=enum,
        )


def _http_rule(method: d2.MethodDescriptorProto) -> Optional[HttpRule]:
    if not method.options.HasExtension(annotations_pb2.http):
        return None
    rule = method.options.Extensions[annotations_pb2.http]
    pattern = rule.WhichOneof("pattern")
    result = HttpRule(body=rule.body)
    if pattern == "custom":
        result.custom = rule.custom.kind
    elif pattern is not None:
        setattr(result, pattern, getattr(rule, pattern))
    return result


def _build_service(
    file_proto: d2.FileDescriptorProto,
    svc: d2.ServiceDescriptorProto,
    registry: _TypeRegistry,
) -> Service:
    full_service_name = _qualify(file_proto.package, svc.name)
    methods: List[Method] = []
    for method in svc.method:
        methods.append(
            Method(
                name=method.name,
                input=registry.message(method.input_type, f"{full_service_name}/{method.name}"),
                full_service_name=full_service_name,
                http_rule=_http_rule(method),
            )
        )
    return Service(name=svc.name, methods=methods)


def load_proto_files(
    proto_files: Iterable[d2.FileDescriptorProto],
    files_to_generate: Iterable[str],
) -> List[ProtoFile]:
    """Build ProtoFile models for ``files_to_generate``.

    ``proto_files`` must contain every file needed to resolve their types
    (protoc sends dependencies too). Output order follows ``files_to_generate``.
    """
    proto_files = list(proto_files)
    registry = _TypeRegistry()
    for file_proto in proto_files:
        registry.register_file(file_proto)
    registry.resolve_fields()

    by_name = {f.name: f for f in proto_files}
    result: List[ProtoFile] = []
    for name in files_to_generate:
        file_proto = by_name.get(name)
        if file_proto is None:
            raise DescriptorError(f"File not found in request: {name}")
        result.append(
            ProtoFile(
                name=file_proto.name,
                package=file_proto.package,
                services=[_build_service(file_proto, svc, registry) for svc in file_proto.service],
            )
        )
    return result
