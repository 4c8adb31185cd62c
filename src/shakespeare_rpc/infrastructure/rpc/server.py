"""grpc.aio server construction and listen-port binding."""

from __future__ import annotations

from dataclasses import dataclass

import grpc

from shakespeare_rpc.application.services.answer_service import AnswerService
from shakespeare_rpc.infrastructure.rpc.answer_proto import add_greeter_servicer_to_server
from shakespeare_rpc.infrastructure.rpc.answer_servicer import AnswerServicer

DEFAULT_PORT = 50051
DEFAULT_HOST = "[::]"


class ListenError(RuntimeError):
    """Raised when the server cannot bind its listen address."""


@dataclass(frozen=True)
class BoundGrpcServer:
    """Server with its listen port already bound but not yet started."""

    server: grpc.aio.Server
    host: str
    port: int

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def build_grpc_server(
    *,
    answer_service: AnswerService,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> BoundGrpcServer:
    """Create the server, register the Greeter servicer, and bind `host:port`.

    Port 0 binds an ephemeral port; the chosen port is returned in the result.
    """

    server = grpc.aio.server()
    add_greeter_servicer_to_server(AnswerServicer(answer_service=answer_service), server)

    requested_address = f"{host}:{port}"
    try:
        bound_port = server.add_insecure_port(requested_address)
    except RuntimeError as error:
        raise ListenError(f"failed to listen on {requested_address}") from error
    # Older grpcio releases report bind failure as port 0 instead of raising.
    if bound_port == 0:
        raise ListenError(f"failed to listen on {requested_address}")

    return BoundGrpcServer(server=server, host=host, port=bound_port)
