from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class DescriptorError(Exception):
    """Raised when the descriptor tree references something it does not contain."""


@dataclass
class EnumType:
    full_name: str
    values: List[str] = field(default_factory=list)


@dataclass
class Field:
    name: str
    json_name: str
    kind: str
    is_repeated: bool = False
    message: Optional[Message] = None
    enum: Optional[EnumType] = None


@dataclass
class Message:
    full_name: str
    fields: List[Field] = field(default_factory=list)


@dataclass
class HttpRule:
    """Mirror of google.api.HttpRule; at most one pattern is set."""

    get: str = ""
    put: str = ""
    post: str = ""
    delete: str = ""
    patch: str = ""
    custom: str = ""
    body: str = ""


@dataclass
class Method:
    name: str
    input: Optional[Message]
    full_service_name: str
    http_rule: Optional[HttpRule] = None

    @property
    def grpc_method(self) -> str:
        """Fully qualified selector: package.Service/Method"""
        return f"{self.full_service_name}/{self.name}"


@dataclass
class Service:
    name: str
    methods: List[Method] = field(default_factory=list)


@dataclass
class ProtoFile:
    name: str
    package: str = ""
    services: List[Service] = field(default_factory=list)


@dataclass(frozen=True)
class EnvironmentConfig:
    name: str
    http_url: str
    grpc_url: str


@dataclass
class GeneratedFile:
    name: str
    content: str
