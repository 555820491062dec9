"""Watch mode: rescan on change, publish reports by atomic swap.

Every scan builds a fresh immutable :class:`Report`. Only a scan that
completes is swapped into the :class:`ReportHolder`; a scan superseded by
a newer change is cancelled between documents and leaves the previous
report untouched.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from kbcheck.domain.errors import KbcheckError, ScanCancelled
from kbcheck.infrastructure.filesystem import find_documents, snapshot

if TYPE_CHECKING:
    from kbcheck.domain.schema import SchemaRule
    from kbcheck.services.check import CheckService
    from kbcheck.services.report import Report

logger = logging.getLogger(__name__)

type Stamp = tuple[tuple[str, int, int], ...]


class ReportHolder:
    """Holds the current report; readers never see a partial one."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._report: Report | None = None
        self._generation = 0

    @property
    def current(self) -> Report | None:
        with self._lock:
            return self._report

    @property
    def generation(self) -> int:
        """Number of reports published so far."""
        with self._lock:
            return self._generation

    def publish(self, report: Report) -> int:
        """Replace the current report with *report*; return the new generation."""
        with self._lock:
            self._report = report
            self._generation += 1
            return self._generation


@dataclass
class _InFlight:
    future: Future[Report]
    cancel: threading.Event
    stamp: Stamp


class Watcher:
    """Polls *root* and revalidates whenever a document changes.

    Args:
        service: Service used for discovery and validation.
        root: Scan root.
        rules: Schema rules (None skips front-matter checks).
        interval: Seconds between polls.
        on_report: Called with each published report.
    """

    def __init__(
        self,
        service: CheckService,
        root: Path,
        rules: Sequence[SchemaRule] | None,
        *,
        interval: float = 1.0,
        on_report: Callable[[Report], None] | None = None,
        holder: ReportHolder | None = None,
    ) -> None:
        self._service = service
        self._root = root
        self._rules = rules
        self._interval = interval
        self._on_report = on_report
        self.holder = holder or ReportHolder()

    def stamp(self) -> Stamp:
        """Fingerprint of the document set: paths, mtimes and sizes."""
        paths = find_documents(
            self._root,
            include=self._service.scan_config.include,
            exclude=self._service.scan_config.exclude,
        )
        stamps = snapshot(self._root, paths)
        return tuple((path, *stamps[path]) for path in sorted(stamps))

    def scan(self, cancel: threading.Event | None = None) -> Report:
        """Run one full scan and publish its report.

        Raises:
            ScanCancelled: *cancel* was set mid-scan; nothing is published.
        """
        sources = self._service.discover(self._root)
        result = self._service.validate(sources, self._rules, cancel=cancel)
        self.holder.publish(result.report)
        if self._on_report is not None:
            self._on_report(result.report)
        return result.report

    def run(self, *, max_scans: int | None = None, stop: threading.Event | None = None) -> int:
        """Poll until *stop* is set or *max_scans* scans have been published.

        A poll or scan that fails with ``OSError`` or :class:`KbcheckError`
        (the root vanishing during a branch switch, say) is logged; the last
        published report stays current and polling continues.

        Returns the number of published scans.
        """
        stop = stop or threading.Event()
        published = 0
        last_stamp: Stamp | None = None
        inflight: _InFlight | None = None

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="kbcheck-watch") as pool:
            while not stop.is_set():
                try:
                    stamp = self.stamp()
                except (OSError, KbcheckError) as exc:
                    logger.warning("Cannot poll %s: %s", self._root, exc)
                    stop.wait(self._interval)
                    continue

                if inflight is not None:
                    if stamp != inflight.stamp:
                        inflight.cancel.set()
                    if inflight.future.done():
                        try:
                            inflight.future.result()
                            published += 1
                        except ScanCancelled:
                            logger.debug("Superseded scan cancelled")
                            last_stamp = None
                        except (OSError, KbcheckError) as exc:
                            logger.warning("Scan of %s failed: %s", self._root, exc)
                            last_stamp = None
                        inflight = None

                if max_scans is not None and published >= max_scans:
                    break

                if inflight is None and stamp != last_stamp:
                    cancel = threading.Event()
                    future = pool.submit(self.scan, cancel)
                    inflight = _InFlight(future=future, cancel=cancel, stamp=stamp)
                    last_stamp = stamp
                    continue

                stop.wait(self._interval)

            if inflight is not None:
                inflight.cancel.set()
        return published
