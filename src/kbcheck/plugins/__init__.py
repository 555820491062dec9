"""Extension layer: extra lint rules via pluggy.

Discovery: entry points in the ``kbcheck.plugins`` group plus built-ins.
INVARIANT: Plugin failures are warnings, never errors.
"""

from kbcheck.plugins.manager import PluginManager

__all__ = ["PluginManager"]
