#!/usr/bin/env python3
"""Write the installation base path into pub/.htaccess."""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path
from typing import Callable, Iterable, Optional
from urllib.parse import urlsplit

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from magetools.lib import logging_utils as log  # noqa: E402
from magetools.lib.config_loader import (  # noqa: E402
    ConfigError,
    InstallerConfig,
    build_installer_config,
)
from magetools.lib.console import ask_confirmation, parse_bool_option  # noqa: E402

MARKER = b"#RewriteBase /magento/"
QUESTION = "Write BaseURL to .htaccess file? [n]: "
BACKUP_SUFFIX = ".dist"


def should_rewrite(
    flag_value: Optional[bool],
    default_mode: bool,
    prompt: Callable[[], bool],
) -> bool:
    """Decide whether to rewrite, prompting only when neither flag decides."""
    if flag_value is not None:
        return flag_value
    if default_mode:
        return False
    return bool(prompt())


def extract_path(base_url: str) -> str:
    try:
        return urlsplit(base_url or "").path
    except ValueError:
        return ""


def htaccess_path(installation_folder: str | Path) -> Path:
    return Path(installation_folder) / "pub" / ".htaccess"


def backup_original_file(path: Path) -> Path:
    target = path.with_name(path.name + BACKUP_SUFFIX)
    shutil.copyfile(path, target)
    return target


def replace_content(path: Path, base_url: str) -> bool:
    content = path.read_bytes()
    replacement = b"RewriteBase " + extract_path(base_url).encode("utf-8")
    found = MARKER in content
    path.write_bytes(content.replace(MARKER, replacement, 1))
    return found


def replace_htaccess_file(base_url: str, installation_folder: str | Path) -> bool:
    path = htaccess_path(installation_folder)
    backup = backup_original_file(path)
    found = replace_content(path, base_url)
    log.log_event(
        "INSTALL",
        "magetools/install/rewrite-htaccess",
        {"file": str(path), "backup": str(backup), "base_url": base_url, "replaced": found},
    )
    return found


def execute(
    load_config: Callable[[], InstallerConfig],
    replace_flag: Optional[bool],
    default_mode: bool,
    prompt: Callable[[], bool],
) -> bool:
    """Run the installer step; returns True when the file was rewritten."""
    if not should_rewrite(replace_flag, default_mode, prompt):
        return False
    config = load_config()
    args = config.get_array("installation_args")
    if "base_url" not in args:
        raise ConfigError("Missing installation_args.base_url")
    found = replace_htaccess_file(str(args["base_url"] or ""), config.get_string("installationFolder"))
    if not found:
        log.warning("RewriteBase marker not found, .htaccess left unchanged")
    return True


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="YAML file with installation_args / installationFolder")
    parser.add_argument("--installation-folder", help="Magento root directory")
    parser.add_argument("--base-url", help="Base URL of the installation")
    parser.add_argument(
        "--use-default-config-params",
        action="store_true",
        help="Do not prompt; skip the rewrite unless --replace-htaccess-file is given",
    )
    parser.add_argument(
        "--replace-htaccess-file",
        default=None,
        help="Rewrite without prompting (yes/no)",
    )
    parser.set_defaults(func=cmd_rewrite)


def cmd_rewrite(args: argparse.Namespace) -> int:
    def load_config() -> InstallerConfig:
        return build_installer_config(args.config, args.base_url, args.installation_folder)

    rewritten = execute(
        load_config,
        parse_bool_option(args.replace_htaccess_file),
        args.use_default_config_params,
        lambda: ask_confirmation(QUESTION, default=False),
    )
    if rewritten:
        log.success("pub/.htaccess updated (backup: pub/.htaccess.dist)")
    else:
        log.info("Skipped .htaccess rewrite")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Write BaseURL path to pub/.htaccess")
    add_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return args.func(args)
    except (ConfigError, OSError) as exc:
        log.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
