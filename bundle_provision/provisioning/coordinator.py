"""Provisioning state machine behind `ensure_ready()`."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from bundle_provision.config.model import AppConfig
from bundle_provision.core.errors import (
    ConfigurationError,
    CopyIncompleteError,
    CopySizeAnomalyError,
    CorruptAfterCopyError,
    CorruptAfterRecopyError,
    SourceUnavailableError,
)
from bundle_provision.core.types import AssetDescriptor, ProvisioningState
from bundle_provision.observability.context import add_error, bind_attempt, set_state
from bundle_provision.observability.logging import KVLogger, get_logger

from .integrity import IntegrityChecker
from .locator import SourceLocator, build_locator
from .single_flight import SingleFlight
from .version_store import VersionStore


def _unlink_if_exists(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def _file_size(path: Path) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


class ProvisioningCoordinator:
    """Makes sure the bundled asset is installed, complete and current.

    `ensure_ready()` must be awaited before the destination file is opened.
    Concurrent calls share one attempt through the injected `SingleFlight`;
    a failed attempt leaves the cell idle so the next call retries.
    """

    def __init__(
        self,
        descriptor: AssetDescriptor,
        locator: SourceLocator,
        *,
        flight: SingleFlight[None] | None = None,
        versions: VersionStore | None = None,
        integrity: IntegrityChecker | None = None,
        logger: KVLogger | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._locator = locator
        self._destination_dir = Path(locator.resolve_destination_dir())
        if not self._destination_dir.is_absolute():
            raise ConfigurationError("destination directory must be absolute", path=self._destination_dir)
        self._destination_path = self._destination_dir / descriptor.name
        self._flight: SingleFlight[None] = flight or SingleFlight()
        self._versions = versions or VersionStore(self._destination_dir)
        self._integrity = integrity or IntegrityChecker(descriptor)
        self._log = logger or get_logger("bundle_provision.provisioning")

    @classmethod
    def from_config(cls, config: AppConfig, *, flight: SingleFlight[None] | None = None) -> ProvisioningCoordinator:
        return cls(config.asset.descriptor(), build_locator(config), flight=flight)

    @property
    def descriptor(self) -> AssetDescriptor:
        return self._descriptor

    @property
    def destination_dir(self) -> Path:
        return self._destination_dir

    @property
    def destination_path(self) -> Path:
        return self._destination_path

    @property
    def state(self) -> ProvisioningState:
        return self._flight.state

    async def ensure_ready(self) -> None:
        await self._flight.run(self._attempt)

    def ensure_ready_blocking(self) -> None:
        self._flight.run_blocking(self._attempt)

    async def _attempt(self) -> None:
        attempt_id = bind_attempt()
        self._log.info(
            "provision_start",
            destination=str(self._destination_path),
            source=self._locator.describe_source(),
            bundle_version=self._descriptor.bundle_version,
        )
        try:
            await self._provision(recopy=False)
        except BaseException as exc:
            add_error(type(exc).__name__)
            self._log.error(
                "provision_failed",
                error_type=type(exc).__name__,
                error=str(exc),
                retryable=getattr(exc, "retryable", False),
            )
            await self._discard_destination()
            raise
        finally:
            set_state("done")
        self._log.info("provision_ready", attempt=attempt_id)

    async def _provision(self, *, recopy: bool) -> None:
        dest = self._destination_path
        set_state("decide")
        reason = await self._copy_reason()

        if reason is not None:
            self._log.info("copy_required", reason=reason, recopy=recopy)
            set_state("copy")
            await self._copy()
            set_state("verify")
            await self._verify_copy(recopy=recopy)
        else:
            set_state("revalidate")
            report = await asyncio.to_thread(self._integrity.inspect, dest)
            if not report.ok:
                if recopy:
                    raise CorruptAfterRecopyError(
                        f"asset still invalid after re-copy ({report.verdict.value})", path=dest
                    )
                self._log.warning("revalidate_failed", verdict=report.verdict.value, size=report.size)
                try:
                    await asyncio.to_thread(_unlink_if_exists, dest)
                except OSError as e:
                    raise CopyIncompleteError(f"cannot remove invalid destination: {e}", path=dest) from e
                await self._provision(recopy=True)
                return
            self._log.info("provision_skip", size=report.size)

        set_state("finalize")
        await self._versions.aset_installed_version(self._descriptor.bundle_version)
        self._log.info("marker_written", version=self._descriptor.bundle_version)

    async def _copy_reason(self) -> str | None:
        dest = self._destination_path
        if not await asyncio.to_thread(dest.exists):
            return "missing"
        installed = await self._versions.aget_installed_version()
        if installed < self._descriptor.bundle_version:
            return f"outdated:{installed}"
        report = await asyncio.to_thread(self._integrity.inspect, dest)
        if not report.ok:
            return f"invalid:{report.verdict.value}"
        return None

    async def _copy(self) -> None:
        dest = self._destination_path
        try:
            await asyncio.to_thread(self._destination_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"cannot create destination directory: {e}", path=self._destination_dir) from e

        try:
            if await asyncio.to_thread(_unlink_if_exists, dest):
                self._log.info("stale_removed", path=str(dest))
        except OSError as e:
            raise CopyIncompleteError(f"cannot remove stale destination: {e}", path=dest) from e

        present = await asyncio.to_thread(self._locator.source_exists)
        self._log.debug("source_check", source=self._locator.describe_source(), present=present)
        if not present:
            raise SourceUnavailableError(
                f"bundled source not found: {self._locator.describe_source()}", path=dest
            )

        written = await asyncio.to_thread(self._locator.fetch_source_into, dest)
        self._log.info("copy_done", bytes=written)

    async def _verify_copy(self, *, recopy: bool) -> None:
        dest = self._destination_path
        size = await asyncio.to_thread(_file_size, dest)
        if size == 0:
            raise CopyIncompleteError("copied file is empty", path=dest)

        floor = self._descriptor.expected_min_size_bytes
        if size < floor:
            raise CopySizeAnomalyError(
                f"copied file is only {size} bytes, expected at least {floor}",
                path=dest,
                size=size,
                expected_min=floor,
            )

        report = await asyncio.to_thread(self._integrity.inspect, dest)
        readable = report.ok and await asyncio.to_thread(self._integrity.probe_readable, dest)
        if not readable:
            error = CorruptAfterRecopyError if recopy else CorruptAfterCopyError
            raise error(f"copied file failed integrity check ({report.verdict.value})", path=dest)
        self._log.info("verify_ok", size=size)

    async def _discard_destination(self) -> None:
        """Best-effort removal after a failed attempt; never raises."""

        try:
            removed = await asyncio.to_thread(_unlink_if_exists, self._destination_path)
        except OSError as e:
            self._log.warning("cleanup_failed", path=str(self._destination_path), error=str(e))
            return
        if removed:
            self._log.info("cleanup_done", path=str(self._destination_path))
