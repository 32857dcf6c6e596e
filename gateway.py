"""
gateway.py: JSON-over-HTTP front end for the coffee recommender.

Web clients talk plain JSON to this gateway; each request is forwarded to
the recommender's gRPC service (``python main.py``) and the answer is
returned as JSON.

Routes
------
GET  /health                     Liveness check
GET  /api/recommendations        ?user_id=X[&limit=N]
POST /api/recommendations/quiz   body: {quiz, userId?, limit?}
GET  /api/preferences            ?user_id=X
POST /api/quiz                   body: {userId, quiz}
POST /api/favorites              body: {userId, coffeeId, favorited?: bool}
POST /api/viewed                 body: {userId, coffeeId}

Startup order
-------------
1. python main.py      recommender gRPC server
2. python gateway.py   HTTP on HTTP_PORT, forwarding to RECOMMENDER_ADDRESS
"""

from __future__ import annotations

import json
import logging
import socketserver
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

import grpc

import config
from coffee_reco.client import RecommenderClient

logger = logging.getLogger("gateway")

Response = tuple[int, Any]


class GatewayApp:
    """Routes HTTP requests to recommender RPCs.

    Kept free of socket handling so routing can be exercised directly.

    Args:
        client: A :class:`~coffee_reco.client.RecommenderClient` (or any
            object with a compatible ``call`` method).
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def handle(
        self, method: str, path: str, query: dict[str, list[str]], body: Any
    ) -> Response:
        """Dispatch one request and return ``(status, json_payload)``."""
        if method == "GET":
            if path == "/health":
                return 200, {"ok": True}
            if path == "/api/recommendations":
                return self._recommendations(query)
            if path == "/api/preferences":
                return self._preferences(query)
        elif method == "POST":
            if not isinstance(body, dict):
                return 400, {"error": "JSON object body required"}
            if path == "/api/recommendations/quiz":
                return self._forward("GetQuizRecommendations", body)
            if path == "/api/quiz":
                return self._forward("SubmitQuiz", body, ok_only=True)
            if path == "/api/favorites":
                return self._favorite(body)
            if path == "/api/viewed":
                return self._forward("ViewedCoffee", body, ok_only=True)
        return 404, {"error": "Not found"}

    # ------------------------------------------------------------------
    # Route handlers
    # ------------------------------------------------------------------

    def _recommendations(self, query: dict[str, list[str]]) -> Response:
        """GET /api/recommendations?user_id=X[&limit=N]"""
        uid = (query.get("user_id") or [""])[0].strip()
        if not uid:
            return 400, {"error": "user_id query parameter required"}
        payload: dict[str, Any] = {"userId": uid}
        limit = (query.get("limit") or [""])[0].strip()
        if limit:
            payload["limit"] = limit
        return self._forward("GetRecommendations", payload)

    def _preferences(self, query: dict[str, list[str]]) -> Response:
        """GET /api/preferences?user_id=X"""
        uid = (query.get("user_id") or [""])[0].strip()
        if not uid:
            return 400, {"error": "user_id query parameter required"}
        return self._forward("GetPreferences", {"userId": uid})

    def _favorite(self, body: dict[str, Any]) -> Response:
        """POST /api/favorites  body: {userId, coffeeId, favorited}"""
        favorited = body.get("favorited", True)
        if not isinstance(favorited, bool):
            return 400, {"error": "favorited must be true or false"}
        method = "FavoriteCoffee" if favorited else "UnfavoriteCoffee"
        payload = {"userId": body.get("userId"), "coffeeId": body.get("coffeeId")}
        return self._forward(method, payload, ok_only=True)

    def _forward(self, method: str, payload: dict[str, Any], ok_only: bool = False) -> Response:
        try:
            result = self._client.call(method, payload)
        except grpc.RpcError as exc:
            code = exc.code()
            msg = f"gRPC error: {code}: {exc.details()}"
            if code == grpc.StatusCode.INVALID_ARGUMENT:
                return 400, {"error": exc.details()}
            logger.error("%s failed: %s", method, msg)
            return 502, {"error": msg}
        return 200, ({"ok": True} if ok_only else result)


# ---------------------------------------------------------------------------
# HTTP server
# ---------------------------------------------------------------------------


class _ThreadingHTTPServer(socketserver.ThreadingMixIn, HTTPServer):
    """Each HTTP request is handled in its own thread.

    Required because each handler blocks on a gRPC call to the recommender.
    """

    daemon_threads = True


def make_handler(app: GatewayApp) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class bound to *app*."""

    class GatewayHTTPHandler(BaseHTTPRequestHandler):
        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.debug("%s - %s", self.address_string(), format % args)

        def do_GET(self) -> None:
            parsed = urlparse(self.path)
            self._respond(*app.handle("GET", parsed.path, parse_qs(parsed.query), None))

        def do_POST(self) -> None:
            parsed = urlparse(self.path)
            try:
                length = int(self.headers.get("Content-Length", 0))
                body = json.loads(self.rfile.read(length) or b"{}")
            except ValueError as exc:
                self._respond(400, {"error": f"Invalid JSON: {exc}"})
                return
            self._respond(*app.handle("POST", parsed.path, parse_qs(parsed.query), body))

        def _respond(self, status: int, data: Any) -> None:
            body = json.dumps(data).encode()
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.send_header("Access-Control-Allow-Origin", "*")
            self.end_headers()
            self.wfile.write(body)

    return GatewayHTTPHandler


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Start the HTTP gateway (blocks until Ctrl-C)."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    client = RecommenderClient(
        config.RECOMMENDER_ADDRESS, timeout_seconds=config.RPC_TIMEOUT_SECONDS
    )
    app = GatewayApp(client)
    http_server = _ThreadingHTTPServer((config.HTTP_HOST, config.HTTP_PORT), make_handler(app))
    logger.info("Gateway listening on http://%s:%d", config.HTTP_HOST, config.HTTP_PORT)
    logger.info("Forwarding to recommender at %s", config.RECOMMENDER_ADDRESS)
    try:
        http_server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    finally:
        client.close()


if __name__ == "__main__":
    main()
