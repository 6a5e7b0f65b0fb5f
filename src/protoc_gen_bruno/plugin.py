"""protoc-gen-bruno: protoc plugin that emits a Bruno collection.

Reads a CodeGeneratorRequest from stdin and writes a CodeGeneratorResponse
to stdout, following the protoc plugin protocol.

Usage:
    protoc --plugin=protoc-gen-bruno --bruno_out=./bruno/collections \\
           --bruno_opt=mode=all,dev_url=https://api.dev.example.com your.proto
"""

from __future__ import annotations

import logging
import sys

from google.protobuf.compiler import plugin_pb2 as plugin

from protoc_gen_bruno.main import generate_collection
from protoc_gen_bruno.models import DescriptorError
from protoc_gen_bruno.options import OptionsError, parse_parameter
from protoc_gen_bruno.parser.descriptor_loader import load_proto_files


def handle_request(request: plugin.CodeGeneratorRequest) -> plugin.CodeGeneratorResponse:
    """Run the generator for one CodeGeneratorRequest.

    Errors caused by the input are reported through ``response.error`` so
    protoc prints them and fails the build.
    """
    response = plugin.CodeGeneratorResponse()
    response.supported_features = plugin.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        options = parse_parameter(request.parameter)
        files = load_proto_files(request.proto_file, request.file_to_generate)
        generated = generate_collection(files, options)
    except (DescriptorError, OptionsError) as e:
        response.error = str(e)
        return response

    for gf in generated:
        response.file.add(name=gf.name, content=gf.content)
    return response


def main() -> int:
    if sys.stdin.isatty():
        print("ERROR!: protoc-gen-bruno is a protoc plugin, it is not intended for direct use.", file=sys.stderr)
        print("", file=sys.stderr)
        print("Usage:", file=sys.stderr)
        print("  protoc --plugin=protoc-gen-bruno \\", file=sys.stderr)
        print("         --bruno_out=./bruno/collections \\", file=sys.stderr)
        print("         your_file.proto", file=sys.stderr)
        return 1

    # stdout carries the response; diagnostics go to stderr
    logging.basicConfig(
        level=logging.WARNING,
        format="protoc-gen-bruno: %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    request = plugin.CodeGeneratorRequest.FromString(sys.stdin.buffer.read())
    response = handle_request(request)
    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == "__main__":
    sys.exit(main())
