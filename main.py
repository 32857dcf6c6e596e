"""Entry point: loads the coffee catalogue and serves recommendations over gRPC."""

from __future__ import annotations

import logging
import signal
import sys
from concurrent import futures

import grpc

import config
from coffee_reco.catalogue import CoffeeCatalogue
from coffee_reco.engine import RecommendationEngine
from coffee_reco.service import (
    RecommenderServicer,
    add_RecommenderServiceServicer_to_server,
)
from coffee_reco.user_state import UserStateStore

logger = logging.getLogger(__name__)


def build_server(
    catalogue: CoffeeCatalogue,
    user_state_store: UserStateStore,
    bind_address: str | None = None,
) -> tuple[grpc.Server, int]:
    """Wire engine and servicer onto a new, not-yet-started gRPC server.

    Args:
        catalogue: The :class:`~coffee_reco.catalogue.CoffeeCatalogue` to rank from.
        user_state_store: Shared by the engine (reads) and servicer (writes).
        bind_address: ``host:port`` to listen on. Defaults to
            ``GRPC_SERVER_HOST:GRPC_SERVER_PORT``; port ``0`` picks a free one.

    Returns:
        The server and the port it was bound to.
    """
    engine = RecommendationEngine(
        catalogue=catalogue,
        user_state_store=user_state_store,
        default_limit=config.DEFAULT_RECOMMENDATION_LIMIT,
        max_limit=config.MAX_RECOMMENDATION_LIMIT,
    )
    servicer = RecommenderServicer(engine=engine, user_state_store=user_state_store)

    server = grpc.server(futures.ThreadPoolExecutor(max_workers=config.GRPC_MAX_WORKERS))
    add_RecommenderServiceServicer_to_server(servicer, server)
    address = bind_address or f"{config.GRPC_SERVER_HOST}:{config.GRPC_SERVER_PORT}"
    port = server.add_insecure_port(address)
    return server, port


def main() -> None:
    """Load the catalogue, start its refresh thread and serve until signalled."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    catalogue = CoffeeCatalogue(
        source_path=config.CATALOGUE_PATH,
        refresh_interval_seconds=config.CATALOGUE_REFRESH_INTERVAL_SECONDS,
    )
    catalogue.refresh()
    coffees, reviews, notes = catalogue.snapshot()
    logger.info(
        "Catalogue %s: %d coffees, %d reviews, %d flavor notes.",
        config.CATALOGUE_PATH,
        len(coffees),
        len(reviews),
        len(notes),
    )
    catalogue.start_refresh_loop()

    user_state_store = UserStateStore(recently_viewed_limit=config.RECENTLY_VIEWED_LIMIT)
    server, port = build_server(catalogue, user_state_store)

    def handle_shutdown(signum: int, frame: object) -> None:
        logger.info("Received %s, stopping server.", signal.Signals(signum).name)
        server.stop(grace=5)
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    server.start()
    logger.info("Coffee recommender listening on %s:%d", config.GRPC_SERVER_HOST, port)
    server.wait_for_termination()


if __name__ == "__main__":
    main()
