from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING

from .base import Formatter

if TYPE_CHECKING:
    from geotrail.services.logparser.schemas import GeoEvent


logger = logging.getLogger(__name__)


class FormatterGroup(Formatter):
    """Fans the formatter lifecycle out to named child formatters.

    Children are called in insertion order. A child that raises is logged
    and isolated so its siblings still produce complete output:

    - failing in ``open`` it gets no further calls,
    - failing in ``process_entry`` it gets no more entries but is still closed,
    - failing in ``close`` it is only logged.

    Failures are kept in ``failures`` keyed by child name.

    The group writes nothing itself, its ``stream`` is unused. Each child
    writes to the stream it was built with.
    """

    name = "group"

    def __init__(self, formatters: Mapping[str, Formatter] | None = None) -> None:
        super().__init__()
        self.formatters: dict[str, Formatter] = dict(formatters or {})
        self.failures: dict[str, Exception] = {}
        self._opened: list[str] = []
        self._receiving: list[str] = []

    def add(self, name: str, formatter: Formatter) -> None:
        if name in self.formatters:
            raise ValueError(f"A formatter named '{name}' is already in the group")
        self.formatters[name] = formatter

    def __len__(self) -> int:
        return len(self.formatters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.formatters)

    def __getitem__(self, name: str) -> Formatter:
        return self.formatters[name]

    def _record_failure(self, name: str, phase: str, error: Exception) -> None:
        logger.exception("Formatter '%s' failed during %s, isolating it", name, phase)
        self.failures.setdefault(name, error)

    def on_open(self) -> None:
        self.failures = {}
        self._opened = []
        for name, formatter in self.formatters.items():
            try:
                formatter.open()
            except Exception as e:
                self._record_failure(name, "open", e)
                continue
            self._opened.append(name)
        self._receiving = list(self._opened)

    def on_entry(self, event: "GeoEvent") -> None:
        for name in list(self._receiving):
            try:
                self.formatters[name].process_entry(event)
            except Exception as e:
                self._record_failure(name, "process_entry", e)
                self._receiving.remove(name)

    def on_close(self) -> None:
        for name in self._opened:
            try:
                self.formatters[name].close()
            except Exception as e:
                self._record_failure(name, "close", e)
        self._opened = []
        self._receiving = []
