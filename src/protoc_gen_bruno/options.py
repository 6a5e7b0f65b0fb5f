"""Generator options, parsed from the protoc plugin parameter string.

protoc passes everything after ``--bruno_opt=`` (comma separated ``key=value``
pairs) as a single parameter string.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict

MODE_ALL = "all"
MODE_HTTP = "http"
MODE_GRPC = "grpc"
MODES = (MODE_ALL, MODE_HTTP, MODE_GRPC)

DEFAULT_PROTO_ROOT = "../../proto"

# protogen-style parameters that belong to protoc itself, not to this plugin
_IGNORED_PARAMS = {"paths", "module", "annotate_code"}


class OptionsError(Exception):
    """Raised for plugin parameters this generator does not understand."""


@dataclass
class GeneratorOptions:
    mode: str = MODE_ALL
    single_collection: bool = True
    collection_name: str = ""
    dev_url: str = ""
    stg_url: str = ""
    prd_url: str = ""
    local_url: str = ""
    grpc_dev_url: str = ""
    grpc_stg_url: str = ""
    grpc_prd_url: str = ""
    grpc_local_url: str = ""
    proto_root: str = DEFAULT_PROTO_ROOT

    @property
    def emits_http(self) -> bool:
        return self.mode in (MODE_ALL, MODE_HTTP)

    @property
    def emits_grpc(self) -> bool:
        return self.mode in (MODE_ALL, MODE_GRPC)

    @classmethod
    def from_values(cls, values: Dict[str, str]) -> GeneratorOptions:
        """Build options from raw string values, normalising mode and flags."""
        known = {f.name for f in fields(cls)}
        for key in values:
            if key not in known:
                raise OptionsError(f"Unknown parameter '{key}'. Known parameters: {sorted(known)}")

        kwargs = dict(values)
        mode = kwargs.get("mode", MODE_ALL)
        kwargs["mode"] = mode if mode in MODES else MODE_ALL
        if "single_collection" in kwargs:
            kwargs["single_collection"] = kwargs["single_collection"] != "false"
        return cls(**kwargs)


def parse_parameter(parameter: str) -> GeneratorOptions:
    """Parse "mode=http,dev_url=https://..." into GeneratorOptions."""
    values: Dict[str, str] = {}
    for item in parameter.split(","):
        if not item:
            continue
        key, _, value = item.partition("=")
        if key in _IGNORED_PARAMS or key.startswith("M"):
            continue
        values[key] = value
    return GeneratorOptions.from_values(values)
