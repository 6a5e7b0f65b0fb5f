from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from google.protobuf import descriptor_pb2 as d2

from protoc_gen_bruno.generator.bruno_request_generator import (
    grpc_request_path,
    http_request_path,
    render_grpc_request,
    render_http_request,
)
from protoc_gen_bruno.generator.collection_generator import (
    build_environments,
    collection_name_for,
    collection_prefix,
    render_collection_config,
)
from protoc_gen_bruno.models import DescriptorError, GeneratedFile, ProtoFile
from protoc_gen_bruno.options import MODE_ALL, MODES, GeneratorOptions, OptionsError
from protoc_gen_bruno.parser.descriptor_loader import load_proto_files

logger = logging.getLogger(__name__)


def generate_collection(
    files: List[ProtoFile],
    options: GeneratorOptions,
    config_generated: Optional[Dict[str, bool]] = None,
) -> List[GeneratedFile]:
    """Generate every Bruno file for the given proto files.

    ``config_generated`` records which output groups already received their
    bruno.json and environment files; pass the same mapping across calls to
    emit each group's config only once.
    """
    if config_generated is None:
        config_generated = {}
    environments = build_environments(options)
    collection_name = collection_name_for(files, options)

    generated: List[GeneratedFile] = []
    for proto_file in files:
        prefix = collection_prefix(proto_file, options)

        if proto_file.services and not config_generated.get(prefix):
            generated.extend(
                render_collection_config(prefix, collection_name, environments, options)
            )
            config_generated[prefix] = True

        for service in proto_file.services:
            for method in service.methods:
                if options.emits_http:
                    content = render_http_request(method)
                    if content is not None:
                        generated.append(GeneratedFile(
                            name=http_request_path(prefix, service.name, method.name),
                            content=content,
                        ))
                if options.emits_grpc:
                    generated.append(GeneratedFile(
                        name=grpc_request_path(prefix, service.name, method.name),
                        content=render_grpc_request(method, proto_file),
                    ))

    logger.info("Generated %d Bruno file(s) from %d proto file(s)", len(generated), len(files))
    return generated


def _find_proto_files(root: str) -> List[str]:
    """Recursively find .proto files under root, sorted for deterministic output."""
    return sorted(str(p) for p in Path(root).rglob("*.proto"))


def _googleapis_include() -> Optional[str]:
    """Directory holding google/api/annotations.proto, if the installed package ships it."""
    from google.api import annotations_pb2

    root = Path(annotations_pb2.__file__).resolve().parent.parent.parent
    if (root / "google" / "api" / "annotations.proto").is_file():
        return str(root)
    return None


def build_descriptor_set(proto_paths: List[str], includes: List[str]) -> d2.FileDescriptorSet:
    """Run protoc on the given files and return the parsed descriptor set."""
    search_paths = list(includes)
    for p in proto_paths:
        search_paths.append(os.path.dirname(os.path.abspath(p)))
    googleapis = _googleapis_include()
    if googleapis:
        search_paths.append(googleapis)

    # de-dup while preserving order
    seen = set()
    inc_args: List[str] = []
    for inc in search_paths:
        if inc and inc not in seen:
            seen.add(inc)
            inc_args.extend(["-I", inc])

    with tempfile.TemporaryDirectory() as td:
        desc_path = os.path.join(td, "descriptor_set.pb")
        cmd = ["protoc", "--include_imports", f"--descriptor_set_out={desc_path}"] + inc_args + proto_paths
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except FileNotFoundError as e:
            raise RuntimeError("'protoc' not found. Please install Protocol Buffers compiler and ensure it is in PATH.") from e
        except subprocess.CalledProcessError as e:
            raise RuntimeError(f"protoc failed: {e.stderr.decode('utf-8', errors='ignore')}") from e

        fds = d2.FileDescriptorSet()
        with open(desc_path, "rb") as f:
            fds.ParseFromString(f.read())
    return fds


def _target_names(fds: d2.FileDescriptorSet, proto_paths: List[str]) -> List[str]:
    """Names of the descriptor-set entries that correspond to the requested files."""
    targets: List[str] = []
    for path in proto_paths:
        abs_path = os.path.abspath(path).replace(os.sep, "/")
        matches = [f.name for f in fds.file if abs_path.endswith("/" + f.name)]
        if not matches:
            raise DescriptorError(f"Could not locate '{path}' in descriptor set")
        # Longest match is the most specific include-relative name
        targets.append(max(matches, key=len))
    return targets


def write_files(generated: List[GeneratedFile], out_dir: str) -> List[str]:
    written: List[str] = []
    for gf in generated:
        out_path = os.path.join(out_dir, gf.name)
        os.makedirs(os.path.dirname(out_path), exist_ok=True)
        Path(out_path).write_text(gf.content, encoding="utf-8")
        written.append(out_path)
    return written


def run(
    proto_paths: List[str],
    out_dir: str,
    options: GeneratorOptions,
    includes: Optional[List[str]] = None,
) -> List[str]:
    """Compile the protos with protoc, generate the collection and write it to out_dir."""
    fds = build_descriptor_set(proto_paths, includes or [])
    files = load_proto_files(fds.file, _target_names(fds, proto_paths))
    return write_files(generate_collection(files, options), out_dir)


def main():
    parser = argparse.ArgumentParser(
        description="Generate a Bruno collection (.bru files) from .proto service definitions",
    )
    parser.add_argument("--proto", required=True, help="Path to a .proto file or a directory containing .proto files (recursively)")
    parser.add_argument("--out", required=True, help="Output directory for the Bruno collection")
    parser.add_argument("-I", "--include", action="append", default=[], help="Additional protoc include path (repeatable)")
    parser.add_argument("--mode", default=MODE_ALL, choices=MODES, help="Generate HTTP requests, gRPC requests or both")
    parser.add_argument("--multi-collection", action="store_true", help="Generate one collection per proto package instead of a single collection")
    parser.add_argument("--collection-name", default="", help="Custom collection name (defaults to one derived from the services)")
    parser.add_argument("--local-url", default="", help="Local environment base URL (defaults to http://localhost:8080)")
    parser.add_argument("--dev-url", default="", help="Development environment base URL")
    parser.add_argument("--stg-url", default="", help="Staging environment base URL")
    parser.add_argument("--prd-url", default="", help="Production environment base URL")
    parser.add_argument("--grpc-local-url", default="", help="Local gRPC host:port, overrides the one derived from --local-url")
    parser.add_argument("--grpc-dev-url", default="", help="Development gRPC host:port, overrides the one derived from --dev-url")
    parser.add_argument("--grpc-stg-url", default="", help="Staging gRPC host:port, overrides the one derived from --stg-url")
    parser.add_argument("--grpc-prd-url", default="", help="Production gRPC host:port, overrides the one derived from --prd-url")
    parser.add_argument("--proto-root", default=None, help="Proto root written into bruno.json, relative to the collection")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped methods and other details to stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    values = {
        "mode": args.mode,
        "single_collection": "false" if args.multi_collection else "true",
        "collection_name": args.collection_name,
        "local_url": args.local_url,
        "dev_url": args.dev_url,
        "stg_url": args.stg_url,
        "prd_url": args.prd_url,
        "grpc_local_url": args.grpc_local_url,
        "grpc_dev_url": args.grpc_dev_url,
        "grpc_stg_url": args.grpc_stg_url,
        "grpc_prd_url": args.grpc_prd_url,
    }
    if args.proto_root is not None:
        values["proto_root"] = args.proto_root
    options = GeneratorOptions.from_values(values)

    if os.path.isdir(args.proto):
        inputs = _find_proto_files(args.proto)
        if not inputs:
            print(f"No .proto files found under directory: {args.proto}")
            return
        includes = [args.proto] + args.include
    else:
        inputs = [args.proto]
        includes = args.include

    try:
        written = run(inputs, args.out, options, includes)
    except (DescriptorError, OptionsError, RuntimeError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    print("Generated:\n" + "\n".join(written))


if __name__ == "__main__":
    main()
