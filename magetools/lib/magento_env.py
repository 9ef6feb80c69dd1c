"""Read-only access to a Magento 2 installation on disk.

Deployment settings and the module list are read from ``app/etc/env.php`` and
``app/etc/config.php`` by asking the PHP CLI to JSON-encode them. Entity counts
are queried through the ``mysql`` client with the credentials of the default
connection.
"""
from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_CACHE_BACKEND = "Cm_Cache_Backend_File"
DEFAULT_EDITION = "Community"
ENTERPRISE_PACKAGE = "magento/product-enterprise-edition"
VERSION_PACKAGES = (
    ENTERPRISE_PACKAGE,
    "magento/product-community-edition",
    "magento/magento2-base",
)
ENTITY_TABLES = {
    "attribute": "eav_attribute",
    "customer": "customer_entity",
    "category": "catalog_category_entity",
    "product": "catalog_product_entity",
}
PHP_DUMP = "echo json_encode(include $argv[1]);"


class MagentoEnvError(RuntimeError):
    """Raised when the installation cannot be inspected."""


class MagentoInstallation:
    def __init__(self, root: Path, php_bin: str = "php", mysql_bin: str = "mysql") -> None:
        self.root = Path(root)
        self.php_bin = php_bin
        self.mysql_bin = mysql_bin
        self._php_cache: Dict[str, Dict[str, Any]] = {}

    def _run(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> str:
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, env=env, check=False)
        except OSError as exc:
            raise MagentoEnvError(f"Cannot execute {cmd[0]}: {exc}") from exc
        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout).strip()
            raise MagentoEnvError(f"{cmd[0]} exited with {proc.returncode}: {detail}")
        return proc.stdout

    def load_php_array(self, relative: str) -> Dict[str, Any]:
        if relative in self._php_cache:
            return self._php_cache[relative]
        path = self.root / relative
        if not path.is_file():
            raise MagentoEnvError(f"{path} not found")
        output = self._run([self.php_bin, "-r", PHP_DUMP, str(path)])
        try:
            data = json.loads(output)
        except json.JSONDecodeError as exc:
            raise MagentoEnvError(f"{path} did not return a PHP array: {exc}") from exc
        # PHP encodes an empty array as a JSON list
        if data == []:
            data = {}
        if not isinstance(data, dict):
            raise MagentoEnvError(f"{path} did not return a PHP array")
        self._php_cache[relative] = data
        return data

    def env_config(self) -> Dict[str, Any]:
        return self.load_php_array("app/etc/env.php")

    def module_config(self) -> Dict[str, Any]:
        return self.load_php_array("app/etc/config.php")

    def get_deployment_value(self, key: str) -> Any:
        node: Any = self.env_config()
        for part in key.split("/"):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def get_cache_backend_name(self) -> str:
        frontend_id = self.get_deployment_value("cache/type/config/frontend") or "default"
        backend = self.get_deployment_value(f"cache/frontend/{frontend_id}/backend")
        return str(backend) if backend else DEFAULT_CACHE_BACKEND

    def list_modules(self) -> List[str]:
        modules = self.module_config().get("modules") or {}
        if not isinstance(modules, dict):
            return []
        return [name for name, enabled in modules.items() if enabled]

    def _locked_packages(self) -> Dict[str, str]:
        lock = self.root / "composer.lock"
        if not lock.is_file():
            return {}
        try:
            data = json.loads(lock.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise MagentoEnvError(f"Cannot read {lock}: {exc}") from exc
        packages: Dict[str, str] = {}
        for entry in data.get("packages", []):
            if isinstance(entry, dict) and entry.get("name"):
                packages[entry["name"]] = str(entry.get("version", ""))
        return packages

    def get_version(self) -> Optional[str]:
        packages = self._locked_packages()
        for name in VERSION_PACKAGES:
            if packages.get(name):
                return packages[name]
        manifest = self.root / "composer.json"
        if manifest.is_file():
            try:
                data = json.loads(manifest.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise MagentoEnvError(f"Cannot read {manifest}: {exc}") from exc
            version = data.get("version") if isinstance(data, dict) else None
            if version:
                return str(version)
        return None

    def get_edition(self) -> str:
        if ENTERPRISE_PACKAGE in self._locked_packages():
            return "Enterprise"
        return DEFAULT_EDITION

    def _mysql_command(self, sql: str) -> tuple[List[str], Dict[str, str]]:
        conn = self.get_deployment_value("db/connection/default")
        if not isinstance(conn, dict):
            raise MagentoEnvError("db/connection/default missing from env.php")
        cmd = [self.mysql_bin, "--batch", "--skip-column-names"]
        host = str(conn.get("host") or "localhost")
        if ":" in host:
            host, _, extra = host.partition(":")
            if extra.isdigit():
                cmd += ["--port", extra]
            elif extra:
                cmd += ["--socket", extra]
        cmd += ["--host", host or "localhost"]
        if conn.get("username"):
            cmd += ["--user", str(conn["username"])]
        cmd += [str(conn.get("dbname") or ""), "-e", sql]
        env = os.environ.copy()
        if conn.get("password"):
            env["MYSQL_PWD"] = str(conn["password"])
        return cmd, env

    def get_entity_count(self, kind: str) -> int:
        table = ENTITY_TABLES.get(kind)
        if table is None:
            raise ValueError(f"Unknown entity kind: {kind}")
        prefix = self.get_deployment_value("db/table_prefix") or ""
        cmd, env = self._mysql_command(f"SELECT COUNT(*) FROM `{prefix}{table}`")
        output = self._run(cmd, env=env).strip()
        try:
            return int(output.splitlines()[-1])
        except (IndexError, ValueError) as exc:
            raise MagentoEnvError(f"Unexpected COUNT output for {table}: {output!r}") from exc
