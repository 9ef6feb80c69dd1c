#!/usr/bin/env python3
"""Print information about a Magento installation."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from magetools.lib import logging_utils as log  # noqa: E402
from magetools.lib import table_renderer  # noqa: E402
from magetools.lib.magento_env import MagentoEnvError, MagentoInstallation  # noqa: E402

SECTION_TITLE = "Magento System Information"
HEADERS = ["name", "value"]
DEPLOYMENT_KEYS = (
    ("Session", "session/save"),
    ("Crypt Key", "crypt/key"),
    ("Install Date", "install/date"),
)
ENTITY_COUNTS = (
    ("Attribute Count", "attribute"),
    ("Customer Count", "customer"),
    ("Category Count", "category"),
    ("Product Count", "product"),
)


def unique_vendors(module_names: Iterable[str]) -> str:
    vendors: List[str] = []
    for name in module_names:
        # first segment is (probably always) the vendor
        vendor = name.split("_", 1)[0]
        if vendor not in vendors:
            vendors.append(vendor)
    return ", ".join(vendors)


class SystemInfo:
    """Collects the info table from a MagentoSystem-like object.

    The system needs ``get_version``, ``get_edition``, ``get_deployment_value``,
    ``get_cache_backend_name``, ``list_modules`` and ``get_entity_count``.
    """

    def __init__(self, system: Any) -> None:
        self.system = system
        self.infos: Dict[str, Any] = {}

    def has_info(self) -> bool:
        return bool(self.infos)

    def get_info(self, key: Optional[str] = None) -> Any:
        if key is None:
            return self.infos
        return self.infos.get(key)

    def add_version_info(self) -> None:
        self.infos["Version"] = self.system.get_version()
        self.infos["Edition"] = self.system.get_edition()

    def add_deployment_info(self) -> None:
        for label, key in DEPLOYMENT_KEYS:
            self.infos[label] = self.system.get_deployment_value(key)

    def add_cache_info(self) -> None:
        self.infos["Cache Backend"] = self.system.get_cache_backend_name()

    def add_vendors(self) -> None:
        self.infos["Vendors"] = unique_vendors(self.system.list_modules())

    def add_entity_counts(self) -> None:
        for label, kind in ENTITY_COUNTS:
            self.infos[label] = self.system.get_entity_count(kind)

    def collect(self) -> Dict[str, Any]:
        self.infos = {}
        self.add_version_info()
        self.add_deployment_info()
        self.add_cache_info()
        self.add_vendors()
        self.add_entity_counts()
        return self.infos

    def rows(self) -> List[List[Any]]:
        return [[key, value] for key, value in self.infos.items()]


def execute(system: Any, fmt: Optional[str] = None, stream: Optional[TextIO] = None) -> Dict[str, Any]:
    out = stream or sys.stdout
    if fmt is None:
        table_renderer.write_section(out, SECTION_TITLE)
    report = SystemInfo(system)
    report.collect()
    table_renderer.render(HEADERS, report.rows(), fmt, out)
    return report.get_info()


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--root", default=".", help="Magento root directory (default: cwd)")
    parser.add_argument(
        "--format",
        choices=table_renderer.FORMATS,
        default=None,
        help=f"Output Format. One of [{','.join(table_renderer.FORMATS)}]",
    )
    parser.add_argument("--php-bin", default="php", help="PHP CLI binary")
    parser.add_argument("--mysql-bin", default="mysql", help="MySQL client binary")
    parser.set_defaults(func=cmd_info)


def cmd_info(args: argparse.Namespace) -> int:
    system = MagentoInstallation(Path(args.root), php_bin=args.php_bin, mysql_bin=args.mysql_bin)
    infos = execute(system, args.format)
    log.log_event("INFO", "magetools/sys/info", {"root": str(system.root), "rows": len(infos)})
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Prints infos about the current magento system.")
    add_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return args.func(args)
    except (MagentoEnvError, OSError) as exc:
        log.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
