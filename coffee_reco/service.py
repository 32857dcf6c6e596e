"""gRPC servicer: the entry point for all inbound calls from the web tier.

The service has no generated stubs. Each method is registered through a
generic handler and exchanges ``google.protobuf.Struct`` messages whose
contents follow the JSON shapes in :mod:`coffee_reco.codec`.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import grpc
from google.protobuf import struct_pb2

from coffee_reco.codec import (
    as_int,
    from_struct,
    preferences_to_dict,
    quiz_from_dict,
    scored_coffee_to_dict,
    to_struct,
)
from coffee_reco.engine import RecommendationEngine
from coffee_reco.user_state import UserStateStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "coffee_reco.RecommenderService"

_RECOMMENDATION_WARN_THRESHOLD_MS = 250


class RecommenderServicer:
    """Implements the ``coffee_reco.RecommenderService`` methods.

    Registered with a gRPC server via
    :func:`add_RecommenderServiceServicer_to_server`.

    Args:
        engine: The :class:`~coffee_reco.engine.RecommendationEngine`.
        user_state_store: The :class:`~coffee_reco.user_state.UserStateStore`.
    """

    def __init__(
        self,
        engine: RecommendationEngine,
        user_state_store: UserStateStore,
    ) -> None:
        self._engine = engine
        self._store = user_state_store

    # ------------------------------------------------------------------
    # Activity methods
    # ------------------------------------------------------------------

    def FavoriteCoffee(self, request: struct_pb2.Struct, context: Any) -> struct_pb2.Struct:
        """Record that a user favorited a coffee. Request: ``{userId, coffeeId}``."""
        return self._record_coffee_event(request, context, "favorite", self._store.record_favorited)

    def UnfavoriteCoffee(self, request: struct_pb2.Struct, context: Any) -> struct_pb2.Struct:
        """Record that a user removed a favorite. Request: ``{userId, coffeeId}``."""
        return self._record_coffee_event(
            request, context, "unfavorite", self._store.record_unfavorited
        )

    def ViewedCoffee(self, request: struct_pb2.Struct, context: Any) -> struct_pb2.Struct:
        """Record that a user viewed a coffee. Request: ``{userId, coffeeId}``."""
        return self._record_coffee_event(request, context, "viewed", self._store.record_viewed)

    def SubmitQuiz(self, request: struct_pb2.Struct, context: Any) -> struct_pb2.Struct:
        """Store a user's quiz answers. Request: ``{userId, quiz}``."""
        payload = from_struct(request)
        try:
            user_id = as_int(payload.get("userId"), "userId")
            self._store.record_quiz(user_id, quiz_from_dict(payload.get("quiz") or {}))
        except ValueError as exc:
            context.set_code(grpc.StatusCode.INVALID_ARGUMENT)
            context.set_details(str(exc))
        except Exception:
            logger.exception("Error recording quiz for request %r", payload)
            context.set_code(grpc.StatusCode.INTERNAL)
            context.set_details("Internal error recording quiz results.")
        return struct_pb2.Struct()

    # ------------------------------------------------------------------
    # Query methods
    # ------------------------------------------------------------------

    def GetRecommendations(self, request: struct_pb2.Struct, context: Any) -> struct_pb2.Struct:
        """Return ranked recommendations. Request: ``{userId, limit?}``.

        Response: ``{userId, recommendations: [{coffee, score, matchReason}]}``.
        """
        payload = from_struct(request)
        start_ms = time.monotonic() * 1000
        try:
            user_id = as_int(payload.get("userId"), "userId")
            limit = _optional_limit(payload)
            ranked = self._engine.get_recommendations(user_id, limit)
        except ValueError as exc:
            context.set_code(grpc.StatusCode.INVALID_ARGUMENT)
            context.set_details(str(exc))
            return struct_pb2.Struct()
        except Exception:
            logger.exception("Unexpected error generating recommendations for %r", payload)
            context.set_code(grpc.StatusCode.INTERNAL)
            context.set_details("Internal error generating recommendations.")
            return struct_pb2.Struct()
        finally:
            _log_elapsed("GetRecommendations", payload, start_ms)

        return to_struct(
            {
                "userId": user_id,
                "recommendations": [scored_coffee_to_dict(s) for s in ranked],
            }
        )

    def GetQuizRecommendations(
        self, request: struct_pb2.Struct, context: Any
    ) -> struct_pb2.Struct:
        """Return recommendations from quiz answers alone.

        Request: ``{quiz, userId?, limit?}``. When ``userId`` is given the
        quiz is also stored as that user's latest submission.
        """
        payload = from_struct(request)
        start_ms = time.monotonic() * 1000
        try:
            quiz = quiz_from_dict(payload.get("quiz") or {})
            limit = _optional_limit(payload)
            if payload.get("userId") is not None:
                self._store.record_quiz(as_int(payload["userId"], "userId"), quiz)
            ranked = self._engine.get_quiz_recommendations(quiz, limit)
        except ValueError as exc:
            context.set_code(grpc.StatusCode.INVALID_ARGUMENT)
            context.set_details(str(exc))
            return struct_pb2.Struct()
        except Exception:
            logger.exception("Unexpected error generating quiz recommendations for %r", payload)
            context.set_code(grpc.StatusCode.INTERNAL)
            context.set_details("Internal error generating recommendations.")
            return struct_pb2.Struct()
        finally:
            _log_elapsed("GetQuizRecommendations", payload, start_ms)

        return to_struct({"recommendations": [scored_coffee_to_dict(s) for s in ranked]})

    def GetPreferences(self, request: struct_pb2.Struct, context: Any) -> struct_pb2.Struct:
        """Return a user's review-derived preferences. Request: ``{userId}``."""
        payload = from_struct(request)
        try:
            user_id = as_int(payload.get("userId"), "userId")
            prefs = self._engine.get_preferences(user_id)
        except ValueError as exc:
            context.set_code(grpc.StatusCode.INVALID_ARGUMENT)
            context.set_details(str(exc))
            return struct_pb2.Struct()
        except Exception:
            logger.exception("Unexpected error extracting preferences for %r", payload)
            context.set_code(grpc.StatusCode.INTERNAL)
            context.set_details("Internal error extracting preferences.")
            return struct_pb2.Struct()
        return to_struct({"userId": user_id, "preferences": preferences_to_dict(prefs)})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record_coffee_event(
        self,
        request: struct_pb2.Struct,
        context: Any,
        event_name: str,
        record: Callable[[int, int], None],
    ) -> struct_pb2.Struct:
        payload = from_struct(request)
        try:
            record(
                as_int(payload.get("userId"), "userId"),
                as_int(payload.get("coffeeId"), "coffeeId"),
            )
        except ValueError as exc:
            context.set_code(grpc.StatusCode.INVALID_ARGUMENT)
            context.set_details(str(exc))
        except Exception:
            logger.exception("Error recording %s event for %r", event_name, payload)
            context.set_code(grpc.StatusCode.INTERNAL)
            context.set_details(f"Internal error recording {event_name} event.")
        return struct_pb2.Struct()


# Method names exposed by the service, in registration order
METHOD_NAMES = (
    "FavoriteCoffee",
    "UnfavoriteCoffee",
    "ViewedCoffee",
    "SubmitQuiz",
    "GetRecommendations",
    "GetQuizRecommendations",
    "GetPreferences",
)


def add_RecommenderServiceServicer_to_server(
    servicer: RecommenderServicer, server: grpc.Server
) -> None:
    """Register every method of *servicer* on *server* under :data:`SERVICE_NAME`."""
    handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=struct_pb2.Struct.FromString,
            response_serializer=struct_pb2.Struct.SerializeToString,
        )
        for name in METHOD_NAMES
    }
    server.add_generic_rpc_handlers(
        (grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),)
    )


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def _optional_limit(payload: dict[str, Any]) -> int | None:
    value = payload.get("limit")
    return None if value is None else as_int(value, "limit")


def _log_elapsed(method: str, payload: dict[str, Any], start_ms: float) -> None:
    elapsed_ms = time.monotonic() * 1000 - start_ms
    if elapsed_ms > _RECOMMENDATION_WARN_THRESHOLD_MS:
        logger.warning(
            "%s for user=%r took %.1fms",
            method,
            payload.get("userId"),
            elapsed_ms,
        )
    else:
        logger.debug(
            "%s for user=%r took %.1fms",
            method,
            payload.get("userId"),
            elapsed_ms,
        )
