from pathlib import Path

from google.protobuf import descriptor_pb2
from grpc_tools import protoc

from shakespeare_rpc.application.dto.answer_models import AnswerRequest, AnswerResponse
from shakespeare_rpc.infrastructure.rpc import answer_proto
from shakespeare_rpc.infrastructure.rpc.answer_servicer import (
    answer_request_from_proto,
    answer_request_to_proto,
    answer_response_from_proto,
    answer_response_to_proto,
)

PROTO_PATH = Path(__file__).resolve().parents[2] / "protos" / "answer.proto"


def _compile_published_schema(output_dir: Path) -> descriptor_pb2.FileDescriptorProto:
    descriptor_set_path = output_dir / "answer.pb"
    exit_code = protoc.main(
        [
            "grpc_tools.protoc",
            f"-I{PROTO_PATH.parent}",
            f"--descriptor_set_out={descriptor_set_path}",
            PROTO_PATH.name,
        ]
    )
    assert exit_code == 0
    descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(descriptor_set_path.read_bytes())
    assert len(descriptor_set.file) == 1
    return descriptor_set.file[0]


def _normalize(file_proto: descriptor_pb2.FileDescriptorProto) -> None:
    # protoc fills json_name and marks `{}` method bodies as present empty options.
    for message_proto in file_proto.message_type:
        for field_proto in message_proto.field:
            field_proto.ClearField("json_name")
    for service_proto in file_proto.service:
        for method_proto in service_proto.method:
            if not method_proto.options.ListFields():
                method_proto.ClearField("options")


def test_runtime_descriptor_equals_compiled_proto_file(tmp_path: Path) -> None:
    compiled = _compile_published_schema(tmp_path)
    runtime = descriptor_pb2.FileDescriptorProto()
    answer_proto.DESCRIPTOR.CopyToProto(runtime)
    _normalize(compiled)
    _normalize(runtime)

    assert compiled.syntax == "proto3"
    assert runtime.package == compiled.package
    assert list(runtime.message_type) == list(compiled.message_type)
    assert list(runtime.service) == list(compiled.service)


def test_get_answer_method_path_and_types() -> None:
    service = answer_proto.DESCRIPTOR.services_by_name["Greeter"]
    method = service.methods_by_name["GetAnswer"]

    assert method.input_type.full_name == "greeter.AnswerRequest"
    assert method.output_type.full_name == "greeter.AnswerResponse"
    assert answer_proto.GET_ANSWER_FULL_METHOD == "/greeter.Greeter/GetAnswer"


def test_request_message_wire_bytes_carry_question_in_field_one() -> None:
    message = answer_proto.AnswerRequest(question="Hi")

    assert message.SerializeToString() == b"\x0a\x02Hi"
    assert answer_proto.AnswerRequest.FromString(b"\x0a\x02Hi").question == "Hi"


def test_mapping_functions_convert_between_wire_and_internal_values() -> None:
    request_message = answer_request_to_proto(AnswerRequest(question="Hello"))
    response_message = answer_response_to_proto(AnswerResponse(answer="Good morrow"))

    assert request_message.question == "Hello"
    assert answer_request_from_proto(request_message) == AnswerRequest(question="Hello")
    assert response_message.answer == "Good morrow"
    assert answer_response_from_proto(response_message) == AnswerResponse(answer="Good morrow")
