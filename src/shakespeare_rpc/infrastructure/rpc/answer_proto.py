"""Wire schema for the `greeter.Greeter` service.

Message classes are built at import time from a descriptor matching
`protos/answer.proto`, so no protoc step is needed to run the server.
"""

from __future__ import annotations

from typing import Any, Protocol

import grpc
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PROTO_FILE_NAME = "greeter/answer.proto"
PROTO_PACKAGE = "greeter"
SERVICE_NAME = f"{PROTO_PACKAGE}.Greeter"
GET_ANSWER_METHOD_NAME = "GetAnswer"
GET_ANSWER_FULL_METHOD = f"/{SERVICE_NAME}/{GET_ANSWER_METHOD_NAME}"

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _build_file_descriptor_proto() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=PROTO_FILE_NAME,
        package=PROTO_PACKAGE,
        syntax="proto3",
    )
    for message_name, field_name in (
        ("AnswerRequest", "question"),
        ("AnswerResponse", "answer"),
    ):
        message_proto = file_proto.message_type.add(name=message_name)
        message_proto.field.add(
            name=field_name,
            json_name=field_name,
            number=1,
            type=_FieldProto.TYPE_STRING,
            label=_FieldProto.LABEL_OPTIONAL,
        )

    service_proto = file_proto.service.add(name="Greeter")
    service_proto.method.add(
        name=GET_ANSWER_METHOD_NAME,
        input_type=f".{PROTO_PACKAGE}.AnswerRequest",
        output_type=f".{PROTO_PACKAGE}.AnswerResponse",
    )
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file_descriptor_proto().SerializeToString())

DESCRIPTOR = _POOL.FindFileByName(PROTO_FILE_NAME)
AnswerRequest: Any = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PROTO_PACKAGE}.AnswerRequest")
)
AnswerResponse: Any = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PROTO_PACKAGE}.AnswerResponse")
)


class GreeterServicerPort(Protocol):
    """Server-side implementation of the Greeter service."""

    async def GetAnswer(  # noqa: N802
        self,
        request: Any,
        context: grpc.aio.ServicerContext,
    ) -> Any:
        """Answer one `AnswerRequest` message."""


def add_greeter_servicer_to_server(
    servicer: GreeterServicerPort,
    server: grpc.aio.Server,
) -> None:
    """Register `servicer` for every Greeter method on `server`."""

    rpc_method_handlers = {
        GET_ANSWER_METHOD_NAME: grpc.unary_unary_rpc_method_handler(
            servicer.GetAnswer,
            request_deserializer=AnswerRequest.FromString,
            response_serializer=AnswerResponse.SerializeToString,
        ),
    }
    generic_handler = grpc.method_handlers_generic_handler(SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))


class GreeterStub:
    """Client stub for the Greeter service."""

    def __init__(self, channel: grpc.aio.Channel) -> None:
        self.GetAnswer = channel.unary_unary(
            GET_ANSWER_FULL_METHOD,
            request_serializer=AnswerRequest.SerializeToString,
            response_deserializer=AnswerResponse.FromString,
        )
