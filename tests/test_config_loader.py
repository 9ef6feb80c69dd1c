import json
import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest import mock

from magetools.lib import config_loader
from magetools.lib.config_loader import ConfigError, InstallerConfig


class FakeCaller:
    def __init__(self, pillar):
        self.pillar = pillar

    def cmd(self, func, path, default=None):
        assert func == "pillar.get"
        return self.pillar.get(path, default)


class ConfigLoaderTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        env_patch = mock.patch.dict(os.environ, {}, clear=False)
        env_patch.start()
        self.addCleanup(env_patch.stop)
        os.environ.pop(config_loader.CONFIG_ENV, None)
        os.environ.pop(config_loader.ARGS_ENV, None)
        default_patch = mock.patch.object(
            config_loader, "DEFAULT_CONFIG_FILE", Path(self.tmp.name) / "missing.yaml"
        )
        default_patch.start()
        self.addCleanup(default_patch.stop)
        caller_patch = mock.patch.object(config_loader, "_get_caller", return_value=None)
        self.get_caller = caller_patch.start()
        self.addCleanup(caller_patch.stop)

    def write_config(self, body: str) -> Path:
        path = Path(self.tmp.name) / "install.yaml"
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return path

    def test_yaml_file(self):
        path = self.write_config(
            """
            installationFolder: /var/www/shop
            installation_args:
              base_url: http://shop.test/
              db_name: shop
            """
        )
        config = config_loader.build_installer_config(str(path))
        self.assertEqual(config.get_string("installationFolder"), "/var/www/shop")
        self.assertEqual(config.get_array("installation_args")["base_url"], "http://shop.test/")
        self.assertEqual(config.get_array("installation_args")["db_name"], "shop")

    def test_env_hint_file(self):
        path = self.write_config("installationFolder: /srv/magento\n")
        os.environ[config_loader.CONFIG_ENV] = str(path)
        config = config_loader.build_installer_config()
        self.assertEqual(config.get_string("installationFolder"), "/srv/magento")

    def test_layers_override_in_order(self):
        path = self.write_config(
            """
            installationFolder: /var/www/shop
            installation_args:
              base_url: http://file.test/
            """
        )
        self.get_caller.return_value = FakeCaller(
            {"magetools:installation_args": {"base_url": "http://pillar.test/"}}
        )
        config = config_loader.build_installer_config(str(path))
        self.assertEqual(config.get_array("installation_args")["base_url"], "http://pillar.test/")

        os.environ[config_loader.ARGS_ENV] = json.dumps({"base_url": "http://env.test/"})
        config = config_loader.build_installer_config(str(path))
        self.assertEqual(config.get_array("installation_args")["base_url"], "http://env.test/")

        config = config_loader.build_installer_config(
            str(path), base_url="http://cli.test/", installation_folder="/opt/shop"
        )
        self.assertEqual(config.get_array("installation_args")["base_url"], "http://cli.test/")
        self.assertEqual(config.get_string("installationFolder"), "/opt/shop")

    def test_pillar_installation_folder(self):
        self.get_caller.return_value = FakeCaller({"magetools:installationFolder": "/srv/pillar"})
        config = config_loader.build_installer_config()
        self.assertEqual(config.get_string("installationFolder"), "/srv/pillar")

    def test_explicit_missing_file(self):
        with self.assertRaises(ConfigError):
            config_loader.build_installer_config(str(Path(self.tmp.name) / "nope.yaml"))

    def test_explicit_invalid_file(self):
        path = self.write_config("- just\n- a list\n")
        with self.assertRaises(ConfigError):
            config_loader.build_installer_config(str(path))

    def test_invalid_env_json_ignored(self):
        os.environ[config_loader.ARGS_ENV] = "{broken"
        config = config_loader.build_installer_config(base_url="http://cli.test/")
        self.assertEqual(config.get_array("installation_args"), {"base_url": "http://cli.test/"})

    def test_missing_keys(self):
        config = InstallerConfig({"installation_args": "oops"})
        with self.assertRaises(ConfigError):
            config.get_string("installationFolder")
        with self.assertRaises(ConfigError):
            config.get_array("installation_args")
        with self.assertRaises(ConfigError):
            config.get_array("other")

    def test_pillar_get_without_salt(self):
        self.assertEqual(config_loader.pillar_get("magetools:anything", "fallback"), "fallback")


if __name__ == "__main__":
    unittest.main()
