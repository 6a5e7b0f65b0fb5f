from __future__ import annotations

from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader

from protoc_gen_bruno.models import EnvironmentConfig, GeneratedFile, ProtoFile
from protoc_gen_bruno.options import GeneratorOptions

DEFAULT_COLLECTION_NAME = "API Collection"
DEFAULT_LOCAL_URL = "http://localhost:8080"
DEFAULT_LOCAL_GRPC_URL = "localhost:50051"


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def format_package_name(pkg: str) -> str:
    """Convert "example.v1" to "Example V1"."""
    parts = pkg.split(".")
    return " ".join(p[:1].upper() + p[1:] for p in parts)


def derive_collection_name(custom_name: str, service_names: List[str], package: str) -> str:
    if custom_name:
        return custom_name
    if not service_names:
        return DEFAULT_COLLECTION_NAME
    if len(service_names) == 1:
        return f"{service_names[0]} API"
    if package:
        return f"{format_package_name(package)} API"
    return " & ".join(service_names) + " APIs"


def url_to_grpc_host(http_url: str) -> str:
    """Convert an HTTP(S) base URL to a gRPC host:port.

    https://api.dev.example.com/service -> api.dev.example.com:443
    http://localhost:8080 -> localhost:8080
    """
    url = http_url
    if url.startswith("https://"):
        url = url[len("https://"):]
    if url.startswith("http://"):
        url = url[len("http://"):]

    url = url.split("/", 1)[0]

    if ":" not in url:
        url += ":443" if http_url.startswith("https://") else ":80"
    return url


def _environment(name: str, http_url: str, grpc_override: str) -> EnvironmentConfig:
    return EnvironmentConfig(
        name=name,
        http_url=http_url,
        grpc_url=grpc_override or url_to_grpc_host(http_url),
    )


def build_environments(options: GeneratorOptions) -> List[EnvironmentConfig]:
    """Build the environment list from the configured URLs.

    Local is always present unless a remote environment is configured, in
    which case it only appears when local_url is given explicitly.
    """
    environments: List[EnvironmentConfig] = []
    has_remote = bool(options.dev_url or options.stg_url or options.prd_url)
    if options.local_url or not has_remote:
        if options.local_url:
            environments.append(_environment("Local", options.local_url, options.grpc_local_url))
        else:
            environments.append(EnvironmentConfig(
                name="Local",
                http_url=DEFAULT_LOCAL_URL,
                grpc_url=options.grpc_local_url or DEFAULT_LOCAL_GRPC_URL,
            ))

    remotes = [
        ("Development", options.dev_url, options.grpc_dev_url),
        ("Staging", options.stg_url, options.grpc_stg_url),
        ("Production", options.prd_url, options.grpc_prd_url),
    ]
    for name, http_url, grpc_override in remotes:
        if http_url:
            environments.append(_environment(name, http_url, grpc_override))
    return environments


def collection_name_for(files: List[ProtoFile], options: GeneratorOptions) -> str:
    """Collection name from every file being generated; the package of the first file wins."""
    service_names = [svc.name for f in files for svc in f.services]
    package = files[0].package if files else ""
    return derive_collection_name(options.collection_name, service_names, package)


def collection_prefix(proto_file: ProtoFile, options: GeneratorOptions) -> str:
    """Output folder for a file: empty for a single collection, else the package."""
    if options.single_collection or not proto_file.services or not proto_file.package:
        return ""
    return proto_file.package.replace(".", "_") + "/"


def render_collection_config(
    prefix: str,
    collection_name: str,
    environments: List[EnvironmentConfig],
    options: GeneratorOptions,
) -> List[GeneratedFile]:
    """Render bruno.json and one environment file per environment."""
    env = _get_template_env()
    generated = [
        GeneratedFile(
            name=f"{prefix}bruno.json",
            content=env.get_template("bruno.json.j2").render(
                name=collection_name,
                include_grpc=options.emits_grpc,
                proto_root=options.proto_root,
            ),
        )
    ]

    env_template = env.get_template("environment.bru.j2")
    for environment in environments:
        generated.append(
            GeneratedFile(
                name=f"{prefix}environments/{environment.name}.bru",
                content=env_template.render(
                    env=environment,
                    include_http=options.emits_http,
                    include_grpc=options.emits_grpc,
                ),
            )
        )
    return generated
