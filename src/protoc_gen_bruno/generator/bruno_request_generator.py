from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from protoc_gen_bruno.generator.example_values import example_json, field_value
from protoc_gen_bruno.generator.field_classifier import BODY_WILDCARD, classify_fields
from protoc_gen_bruno.models import DescriptorError, Message, Method, ProtoFile
from protoc_gen_bruno.parser.http_rule import decode_http_rule, extract_path_params

logger = logging.getLogger(__name__)

# Bruno variables resolved from the active environment file.
BASE_URL_VAR = "{{base_url}}"
GRPC_URL_VAR = "{{grpc_url}}"


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _require_input(method: Method) -> Message:
    if method.input is None:
        raise DescriptorError(
            f"Method '{method.grpc_method}' has no resolved request message"
        )
    return method.input


def render_http_request(method: Method) -> Optional[str]:
    """Render the HTTP .bru request for a method.

    Returns None when the method has no usable google.api.http rule.
    """
    decoded = decode_http_rule(method.http_rule)
    if decoded is None:
        logger.debug("Skipping HTTP request for %s: no usable http rule", method.grpc_method)
        return None
    verb, path = decoded
    body_selector = method.http_rule.body
    request = _require_input(method)

    partition = classify_fields(
        request.fields, extract_path_params(path), verb, body_selector
    )

    query_params: List[Dict[str, str]] = []
    for f in partition.query:
        # Query values are plain text, never quoted
        query_params.append({
            "name": f.json_name,
            "value": field_value(f, 0).strip('"'),
        })

    body = None
    if partition.body:
        if body_selector == BODY_WILDCARD:
            body = example_json(request, 1)
        else:
            body_field = partition.body[0]
            if body_field.kind == "message" and body_field.message is not None:
                body = example_json(body_field.message, 1)
            else:
                body = field_value(body_field, 1)

    template = _get_template_env().get_template("http_request.bru.j2")
    return template.render(
        name=method.name,
        verb=verb,
        base_url_var=BASE_URL_VAR,
        path=path,
        query_params=query_params,
        body=body,
    )


def render_grpc_request(method: Method, proto_file: ProtoFile) -> str:
    """Render the gRPC .bru request for a method."""
    request = _require_input(method)
    template = _get_template_env().get_template("grpc_request.bru.j2")
    return template.render(
        name=method.name,
        grpc_url_var=GRPC_URL_VAR,
        grpc_method=method.grpc_method,
        body=example_json(request, 1),
        proto_file=proto_file.name,
    )


def http_request_path(prefix: str, service_name: str, method_name: str) -> str:
    return f"{prefix}{service_name}/{method_name}.bru"


def grpc_request_path(prefix: str, service_name: str, method_name: str) -> str:
    return f"{prefix}{service_name}-gRPC/{method_name}.bru"
