"""gRPC client for ``coffee_reco.RecommenderService``."""

from __future__ import annotations

import logging
import threading
from typing import Any

import grpc
from google.protobuf import struct_pb2

from coffee_reco.codec import from_struct, to_struct
from coffee_reco.service import METHOD_NAMES, SERVICE_NAME

logger = logging.getLogger(__name__)


class RecommenderClient:
    """Thin client that calls the recommender with JSON-shaped dicts.

    The underlying channel is created lazily on first use and reused for
    every call; channels are thread-safe.

    Args:
        address: ``host:port`` of the recommender gRPC server.
        timeout_seconds: Deadline applied to every call.
        channel: An existing channel to use instead of creating one.
    """

    def __init__(
        self,
        address: str,
        timeout_seconds: float = 3.0,
        channel: grpc.Channel | None = None,
    ) -> None:
        self._address = address
        self._timeout = timeout_seconds
        self._channel = channel
        self._lock = threading.Lock()
        self._methods: dict[str, Any] = {}

    def call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Invoke *method* with *payload* and return the response as a dict.

        Raises:
            ValueError: If *method* is not part of the service.
            grpc.RpcError: If the call fails or the server returns an error status.
        """
        if method not in METHOD_NAMES:
            raise ValueError(f"Unknown recommender method {method!r}")
        response = self._method(method)(to_struct(payload), timeout=self._timeout)
        return from_struct(response)

    def close(self) -> None:
        with self._lock:
            if self._channel is not None:
                self._channel.close()
                self._channel = None
                self._methods.clear()

    def _method(self, name: str) -> Any:
        with self._lock:
            if self._channel is None:
                logger.debug("Opening channel to recommender at %s", self._address)
                self._channel = grpc.insecure_channel(self._address)
            if name not in self._methods:
                self._methods[name] = self._channel.unary_unary(
                    f"/{SERVICE_NAME}/{name}",
                    request_serializer=struct_pb2.Struct.SerializeToString,
                    response_deserializer=struct_pb2.Struct.FromString,
                )
            return self._methods[name]
