"""Coffee catalogue: loads and caches the coffee/review/flavor-note snapshot."""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Iterable
from pathlib import Path

from coffee_reco.codec import catalogue_from_dict
from coffee_reco.models import Coffee, FlavorNote, Review

logger = logging.getLogger(__name__)


class CoffeeCatalogue:
    """Caches the catalogue snapshot produced by the data-access layer.

    The snapshot is a JSON file ``{"coffees": [...], "reviews": [...],
    "flavorNotes": [...]}``. It is loaded synchronously by :meth:`refresh`,
    then optionally kept fresh by a background daemon thread.

    All public methods are thread-safe. Readers receive copies, so a
    reload never changes a list a caller is iterating over.

    Args:
        source_path: Path of the snapshot file. ``None`` means the
            catalogue is only ever filled through :meth:`replace`.
        refresh_interval_seconds: How often the background thread reloads
            the file. Defaults to 300 (5 minutes).
    """

    def __init__(
        self,
        source_path: str | Path | None = None,
        refresh_interval_seconds: int = 300,
    ) -> None:
        self._source_path = Path(source_path) if source_path else None
        self._refresh_interval = refresh_interval_seconds
        self._lock = threading.RLock()
        self._coffees: dict[int, Coffee] = {}
        self._reviews: list[Review] = []
        self._flavor_notes: dict[int, FlavorNote] = {}
        self._refresh_thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Reload the snapshot file and swap it in.

        On failure, logs an error and keeps the existing snapshot so the
        service can continue running.
        """
        if self._source_path is None:
            logger.debug("No catalogue source configured; skipping refresh.")
            return
        try:
            with self._source_path.open(encoding="utf-8") as fh:
                data = json.load(fh)
            coffees, reviews, notes = catalogue_from_dict(data)
            self.replace(coffees, reviews, notes)
            logger.info(
                "Coffee catalogue refreshed: %d coffees, %d reviews, %d flavor notes.",
                len(coffees),
                len(reviews),
                len(notes),
            )
        except Exception:
            logger.exception(
                "Failed to refresh coffee catalogue from %s; keeping existing %d coffees.",
                self._source_path,
                len(self._coffees),
            )

    def replace(
        self,
        coffees: Iterable[Coffee],
        reviews: Iterable[Review],
        flavor_notes: Iterable[FlavorNote],
    ) -> None:
        """Atomically replace the whole snapshot."""
        new_coffees = {c.id: c for c in coffees}
        new_reviews = list(reviews)
        new_notes = {n.id: n for n in flavor_notes}
        with self._lock:
            self._coffees = new_coffees
            self._reviews = new_reviews
            self._flavor_notes = new_notes

    def start_refresh_loop(self) -> None:
        """Start a background daemon thread that periodically calls :meth:`refresh`.

        Safe to call multiple times; only one refresh thread is started.
        """
        if self._refresh_thread is not None and self._refresh_thread.is_alive():
            return
        self._refresh_thread = threading.Thread(
            target=self._refresh_loop,
            name="catalogue-refresh",
            daemon=True,
        )
        self._refresh_thread.start()
        logger.debug("Catalogue refresh loop started (interval=%ds).", self._refresh_interval)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[list[Coffee], list[Review], list[FlavorNote]]:
        """Return consistent copies of coffees, reviews and flavor notes."""
        with self._lock:
            return (
                list(self._coffees.values()),
                list(self._reviews),
                list(self._flavor_notes.values()),
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _refresh_loop(self) -> None:
        """Periodically refresh the catalogue. Runs in a daemon thread."""
        while True:
            time.sleep(self._refresh_interval)
            self.refresh()
