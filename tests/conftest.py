import pytest
from google.api import annotations_pb2
from google.protobuf import descriptor_pb2, timestamp_pb2
from google.protobuf.compiler import plugin_pb2

FDP = descriptor_pb2.FieldDescriptorProto

USER_PROTO = "example/v1/user.proto"
POST_PROTO = "example/v1/post.proto"


def _field(name, number, ftype, type_name="", repeated=False, json_name=""):
    fd = FDP(
        name=name,
        number=number,
        type=ftype,
        label=FDP.LABEL_REPEATED if repeated else FDP.LABEL_OPTIONAL,
    )
    if type_name:
        fd.type_name = type_name
    if json_name:
        fd.json_name = json_name
    return fd


def _add_method(service, name, input_type, output_type, verb=None, path="", body=""):
    method = service.method.add(name=name, input_type=input_type, output_type=output_type)
    if verb:
        rule = method.options.Extensions[annotations_pb2.http]
        setattr(rule, verb, path)
        if body:
            rule.body = body
    return method


def make_timestamp_proto() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto()
    timestamp_pb2.DESCRIPTOR.CopyToProto(fdp)
    return fdp


def make_user_proto(package: str = "example.v1") -> descriptor_pb2.FileDescriptorProto:
    """example/v1/user.proto with a UserService covering every http rule shape."""
    prefix = f".{package}" if package else ""
    fdp = descriptor_pb2.FileDescriptorProto(name=USER_PROTO, package=package, syntax="proto3")
    fdp.dependency.append("google/protobuf/timestamp.proto")

    status = fdp.enum_type.add(name="Status")
    status.value.add(name="STATUS_UNSPECIFIED", number=0)
    status.value.add(name="STATUS_ACTIVE", number=1)

    user = fdp.message_type.add(name="User")
    user.field.extend([
        _field("name", 1, FDP.TYPE_STRING),
        _field("email", 2, FDP.TYPE_STRING),
        _field("create_time", 3, FDP.TYPE_MESSAGE, ".google.protobuf.Timestamp", json_name="createTime"),
        _field("status", 4, FDP.TYPE_ENUM, f"{prefix}.Status"),
        _field("tags", 5, FDP.TYPE_STRING, repeated=True),
        _field("labels", 6, FDP.TYPE_MESSAGE, f"{prefix}.User.LabelsEntry", repeated=True),
    ])
    entry = user.nested_type.add(name="LabelsEntry")
    entry.options.map_entry = True
    entry.field.extend([
        _field("key", 1, FDP.TYPE_STRING),
        _field("value", 2, FDP.TYPE_STRING),
    ])

    create = fdp.message_type.add(name="CreateUserRequest")
    create.field.extend([_field("name", 1, FDP.TYPE_STRING), _field("email", 2, FDP.TYPE_STRING)])

    get = fdp.message_type.add(name="GetUserRequest")
    get.field.extend([_field("user_id", 1, FDP.TYPE_STRING)])

    list_req = fdp.message_type.add(name="ListUsersRequest")
    list_req.field.extend([
        _field("page_size", 1, FDP.TYPE_INT32, json_name="pageSize"),
        _field("page_token", 2, FDP.TYPE_STRING, json_name="pageToken"),
    ])

    update = fdp.message_type.add(name="UpdateUserRequest")
    update.field.extend([
        _field("user_id", 1, FDP.TYPE_STRING),
        _field("user", 2, FDP.TYPE_MESSAGE, f"{prefix}.User"),
    ])

    node = fdp.message_type.add(name="Node")
    node.field.extend([
        _field("child", 1, FDP.TYPE_MESSAGE, f"{prefix}.Node"),
        _field("id", 2, FDP.TYPE_INT64),
    ])

    svc = fdp.service.add(name="UserService")
    user_type = f"{prefix}.User"
    _add_method(svc, "CreateUser", f"{prefix}.CreateUserRequest", user_type, "post", "/v1/users", "*")
    _add_method(svc, "GetUser", f"{prefix}.GetUserRequest", user_type, "get", "/v1/users/{user_id}")
    _add_method(svc, "ListUsers", f"{prefix}.ListUsersRequest", user_type, "get", "/v1/users")
    _add_method(svc, "UpdateUser", f"{prefix}.UpdateUserRequest", user_type, "patch", "/v1/users/{user_id}", "user")
    _add_method(svc, "Walk", f"{prefix}.Node", f"{prefix}.Node")
    return fdp


def make_post_proto(package: str = "example.v1") -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(name=POST_PROTO, package=package, syntax="proto3")
    req = fdp.message_type.add(name="DeletePostRequest")
    req.field.extend([_field("post_id", 1, FDP.TYPE_STRING), _field("force", 2, FDP.TYPE_BOOL)])
    svc = fdp.service.add(name="PostService")
    _add_method(svc, "DeletePost", f".{package}.DeletePostRequest", f".{package}.DeletePostRequest",
                "delete", "/v1/{post_id=posts/*}")
    return fdp


def make_request(files_to_generate, proto_files, parameter=""):
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.file_to_generate.extend(files_to_generate)
    request.proto_file.extend(proto_files)
    # Round-trip through the wire format like protoc does
    return plugin_pb2.CodeGeneratorRequest.FromString(request.SerializeToString())


@pytest.fixture
def user_request():
    return make_request([USER_PROTO], [make_timestamp_proto(), make_user_proto()])
