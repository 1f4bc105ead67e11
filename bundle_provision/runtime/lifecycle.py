from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from bundle_provision.config.loader import load_app_config, resolve_profile_configs
from bundle_provision.config.model import AppConfig
from bundle_provision.core.errors import ConfigError, ProvisioningError
from bundle_provision.observability.logging import configure_logging, get_logger
from bundle_provision.provisioning.coordinator import ProvisioningCoordinator
from bundle_provision.storage.dictionary import DictionaryDatabase, EmptyDatabaseError


logger = get_logger("bundle_provision.runtime")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2
EXIT_PROVISIONING = 3


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(v) for v in obj]
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.decode("latin-1")
    return obj


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundle-provision",
        description="Install the bundled dictionary database into app storage",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING); overrides logging.level",
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML config file (skips profile resolution)",
    )
    group.add_argument(
        "--profile",
        choices=["app", "dev"],
        default="app",
        help="Config profile under ./configs (app loads app.yaml; dev overlays dev.yaml)",
    )

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("provision", help="Ensure the dictionary is installed, then open it")
    sub.add_parser("print-config", help="Load and print the expanded config")
    return parser


async def provision_and_open(cfg: AppConfig) -> list[str]:
    coordinator = ProvisioningCoordinator.from_config(cfg)
    db = DictionaryDatabase(coordinator)
    await db.open()
    try:
        return db.list_tables()
    finally:
        db.close()


def main(argv: Sequence[str] | None = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]
    if not any(token in ("provision", "print-config") for token in argv_list) and not (
        {"-h", "--help"} & set(argv_list)
    ):
        argv_list = [*argv_list, "provision"]

    parser = _build_parser()
    try:
        ns = parser.parse_args(argv_list)
    except SystemExit as e:
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_FATAL

    configure_logging(level=(ns.log_level or "INFO").upper())

    try:
        if ns.config is not None:
            config_paths = [ns.config]
        else:
            config_paths = resolve_profile_configs(profile=ns.profile, configs_dir=Path.cwd() / "configs")

        cfg = load_app_config(config_paths)
        if ns.log_level is None:
            configure_logging(level=cfg.logging.level)
        logger.info("config_loaded", config_files=[str(p) for p in config_paths], platform=cfg.platform)

        if ns.command == "print-config":
            sys.stdout.write(json.dumps(_jsonable(dataclasses.asdict(cfg)), ensure_ascii=False, indent=2))
            sys.stdout.write("\n")
            return EXIT_OK

        tables = asyncio.run(provision_and_open(cfg))
        logger.info("dictionary_ready", tables=tables)
        return EXIT_OK

    except ConfigError as e:
        logger.error("config_error", error=str(e))
        sys.stderr.write(f"ConfigError: {e}\n")
        return EXIT_CONFIG
    except (ProvisioningError, EmptyDatabaseError) as e:
        logger.error("provisioning_error", error_type=type(e).__name__, error=str(e))
        sys.stderr.write(f"{type(e).__name__}: {e}\n")
        return EXIT_PROVISIONING
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        return EXIT_FATAL
