from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from protoc_gen_bruno.models import Field


class Placement(Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"


# Verbs that never carry a request body.
QUERY_ONLY_VERBS = {"get", "delete"}

# Body selector that puts every non-path field in the body.
BODY_WILDCARD = "*"


@dataclass
class FieldPartition:
    path: List[Field] = field(default_factory=list)
    query: List[Field] = field(default_factory=list)
    body: List[Field] = field(default_factory=list)


def place_field(field_name: str, path_params: Iterable[str], verb: str, body: str) -> Placement:
    """Decide where a top-level request field goes.

    Path placeholders always win. GET/DELETE send everything else as query
    parameters. For POST/PUT/PATCH the body selector picks the body fields;
    an empty selector means no body at all, so the remaining fields become
    query parameters.
    """
    if field_name in path_params:
        return Placement.PATH
    if verb in QUERY_ONLY_VERBS:
        return Placement.QUERY
    if body == BODY_WILDCARD or (body and body == field_name):
        return Placement.BODY
    return Placement.QUERY


def classify_fields(
    fields: List[Field],
    path_params: List[str],
    verb: str,
    body: str,
) -> FieldPartition:
    """Partition request fields into path, query and body buckets.

    Declaration order is kept inside every bucket.
    """
    partition = FieldPartition()
    buckets = {
        Placement.PATH: partition.path,
        Placement.QUERY: partition.query,
        Placement.BODY: partition.body,
    }
    for f in fields:
        buckets[place_field(f.name, path_params, verb, body)].append(f)
    return partition
