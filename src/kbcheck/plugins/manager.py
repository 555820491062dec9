"""Plugin discovery, loading, and lint hook dispatch.

Discovery: ``kbcheck.plugins`` entry points via pluggy's setuptools
loader, plus built-in plugins enabled by configuration.
"""

from __future__ import annotations

import inspect
import logging
import re
from typing import TYPE_CHECKING

import pluggy

from kbcheck.domain.errors import ConfigurationError
from kbcheck.domain.findings import ValidationFinding
from kbcheck.plugins.hookspecs import KbcheckHookSpec

if TYPE_CHECKING:
    from kbcheck.config.settings import KbSettings
    from kbcheck.domain.document import Document
    from kbcheck.services.report import Report

PROJECT_NAME = "kbcheck"
ENTRY_POINT_GROUP = "kbcheck.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin registration and hook dispatch.

    Hook failures are caught, logged, and returned as warning strings;
    a broken plugin never aborts a scan.
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(KbcheckHookSpec)

    def load_entry_points(self) -> list[str]:
        """Load plugins from the ``kbcheck.plugins`` entry point group."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def lint_document(self, document: Document) -> tuple[list[ValidationFinding], list[str]]:
        """Collect plugin findings for *document*.

        Returns ``(findings, warnings)``. Results that are not findings, or
        that point at another document, are dropped with a warning.
        """
        warnings: list[str] = []
        try:
            results = self._pm.hook.lint_document(document=document)
        except Exception as exc:
            logger.warning("lint_document hook failed for %s", document.path, exc_info=True)
            warnings.append(f"Plugin lint failed for {document.path}: {exc}")
            return [], warnings

        findings: list[ValidationFinding] = []
        for batch in results:
            for item in batch or []:
                if not isinstance(item, ValidationFinding):
                    warnings.append(f"Plugin returned a non-finding for {document.path}")
                    continue
                if item.document_path != document.path:
                    warnings.append(
                        f"Plugin finding for {item.document_path!r} dropped "
                        f"while linting {document.path!r}"
                    )
                    continue
                findings.append(item)
        return findings, warnings

    def post_check(self, report: Report) -> list[str]:
        """Notify plugins of a finished report. Returns warning strings."""
        try:
            self._pm.hook.post_check(report=report)
        except Exception as exc:
            logger.warning("post_check hook failed", exc_info=True)
            return [f"Plugin post_check failed: {exc}"]
        return []

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a class directly; hook calls on a
        class object leave ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)


def build_plugin_manager(settings: KbSettings) -> PluginManager:
    """Create a manager with the built-ins and entry points *settings* enable.

    Raises:
        ConfigurationError: ``[lint] filename_pattern`` is not a valid regex.
    """
    from kbcheck.plugins.builtins.filename import FilenameConventionPlugin

    manager = PluginManager()
    pattern = settings.lint.filename_pattern
    if pattern:
        try:
            plugin = FilenameConventionPlugin(pattern, exempt=settings.lint.filename_exempt)
        except re.error as exc:
            msg = f"[lint] filename_pattern {pattern!r} is not a valid regex: {exc}"
            raise ConfigurationError(msg) from exc
        manager.register_plugin(plugin, name="filename-convention")
    if settings.plugins.entry_points:
        manager.load_entry_points()
    return manager
