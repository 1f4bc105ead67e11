"""Bundled dictionary provisioning.

Materializes the read-only SQLite dictionary shipped inside the application
package into writable storage, once per bundle version.
"""

from __future__ import annotations

__version__ = "0.1.0"
