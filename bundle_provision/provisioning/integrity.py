"""Cheap plausibility checks for the provisioned asset.

Two corruption modes dominate in practice: an interrupted copy that leaves an
empty or truncated file, and the wrong file copied into place. A size floor
plus a header signature catches both without parsing the database.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path

from bundle_provision.core.types import AssetDescriptor

# Bytes read at each probe offset when checking that the whole file is readable.
PROBE_WINDOW = 100


class Verdict(str, enum.Enum):
    OK = "ok"
    MISSING = "missing"
    TOO_SMALL = "too_small"
    BAD_SIGNATURE = "bad_signature"
    UNREADABLE = "unreadable"


@dataclass(frozen=True, slots=True)
class IntegrityReport:
    verdict: Verdict
    size: int = 0
    header: bytes = b""

    @property
    def ok(self) -> bool:
        return self.verdict is Verdict.OK


class IntegrityChecker:
    def __init__(self, descriptor: AssetDescriptor) -> None:
        self._descriptor = descriptor

    @property
    def descriptor(self) -> AssetDescriptor:
        return self._descriptor

    def inspect(self, path: Path) -> IntegrityReport:
        """Run every check and report the first one that failed."""

        signature = self._descriptor.signature
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return IntegrityReport(Verdict.MISSING)
        except OSError:
            return IntegrityReport(Verdict.UNREADABLE)

        if not os.path.isfile(path):
            return IntegrityReport(Verdict.UNREADABLE, size=st.st_size)
        if st.st_size < max(self._descriptor.min_valid_size_bytes, len(signature)):
            return IntegrityReport(Verdict.TOO_SMALL, size=st.st_size)

        try:
            with open(path, "rb") as fh:
                header = fh.read(len(signature))
        except OSError:
            return IntegrityReport(Verdict.UNREADABLE, size=st.st_size)

        if header != signature:
            return IntegrityReport(Verdict.BAD_SIGNATURE, size=st.st_size, header=header)
        return IntegrityReport(Verdict.OK, size=st.st_size, header=header)

    def is_valid(self, path: Path) -> bool:
        return self.inspect(path).ok

    def probe_readable(self, path: Path) -> bool:
        """Read a window at the start, middle and end of the file."""

        try:
            size = os.path.getsize(path)
            if size == 0:
                return False
            window = min(PROBE_WINDOW, size)
            with open(path, "rb") as fh:
                for offset in (0, size // 2 - window // 2, size - window):
                    fh.seek(max(0, offset))
                    if len(fh.read(window)) != window:
                        return False
        except OSError:
            return False
        return True
