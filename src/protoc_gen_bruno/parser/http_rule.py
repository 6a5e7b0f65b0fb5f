"""Decode google.api.http rules into a verb and URL template."""

from __future__ import annotations

from typing import List, Optional, Tuple

from protoc_gen_bruno.models import HttpRule

# Oneof order of google.api.HttpRule; "custom" is deliberately absent.
HTTP_VERBS = ("get", "put", "post", "delete", "patch")


def decode_http_rule(rule: Optional[HttpRule]) -> Optional[Tuple[str, str]]:
    """Return (verb, url_template) for a rule, or None if it cannot be used.

    Custom verbs and empty templates yield None so the caller skips the
    HTTP request for that method.
    """
    if rule is None:
        return None
    for verb in HTTP_VERBS:
        path = getattr(rule, verb)
        if path:
            return verb, path
    return None


def extract_path_params(path: str) -> List[str]:
    """Extract placeholder names from a URL template.

    "/v1/users/{user_id}/posts/{post_id}" -> ["user_id", "post_id"]
    "/v1alpha1/{name=environments/*/contact}" -> ["name"]

    Unbalanced braces are tolerated: only spans closed before the end of
    the template are returned.
    """
    params: List[str] = []
    start = -1
    for i, ch in enumerate(path):
        if ch == "{":
            start = i + 1
        elif ch == "}" and start != -1:
            param = path[start:i]
            # Resource pattern {name=accounts/*}: keep only the field name
            param = param.split("=", 1)[0]
            params.append(param)
            start = -1
    return params
