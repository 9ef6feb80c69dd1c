#!/usr/bin/env python3
"""magetools command dispatcher."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from magetools.installer import rewrite_htaccess  # noqa: E402
from magetools.lib import logging_utils as log  # noqa: E402
from magetools.lib.config_loader import ConfigError  # noqa: E402
from magetools.lib.magento_env import MagentoEnvError  # noqa: E402
from magetools.system import info  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Magento command-line helpers")
    sub = parser.add_subparsers(dest="command", required=True)

    rewrite = sub.add_parser("install:rewrite-htaccess", help="Write BaseURL path to pub/.htaccess")
    rewrite_htaccess.add_arguments(rewrite)

    sys_info = sub.add_parser("sys:info", help="Prints infos about the current magento system.")
    info.add_arguments(sys_info)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return args.func(args)
    except (ConfigError, MagentoEnvError, OSError) as exc:
        log.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
