"""
Tests for loading and validating config.yaml.
"""

import dataclasses
import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest import mock

from support import ETHER  # noqa: F401  (adds the project root to sys.path)

from stablecoin_model.config import AppConfig, EngineParams, load_config

VALID_CONFIG = """
log_level: DEBUG
engine:
  liquidation_threshold: 60
  liquidation_bonus: 5
  min_health_factor: 1000000000000000000
  oracle_timeout_seconds: ${TEST_ORACLE_TIMEOUT}
networks:
  test:
    debt_token_symbol: USDX
    assets:
      - symbol: WETH
        decimals: 18
        feed_decimals: 8
        initial_price: 3000
"""


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, text):
        path = Path(self.tmp.name) / "config.yaml"
        path.write_text(textwrap.dedent(text))
        return path

    def test_shipped_config(self):
        cfg = load_config()

        self.assertEqual(cfg.engine, EngineParams())
        self.assertEqual(cfg.log_level, "INFO")
        local = cfg.network("local")
        self.assertEqual(local.debt_token_symbol, "DSC")
        self.assertEqual([a.symbol for a in local.assets], ["WETH", "WBTC"])
        self.assertEqual(local.assets[1].decimals, 8)
        self.assertEqual(local.assets[0].initial_price, 2000)

    def test_env_interpolation(self):
        path = self.write(VALID_CONFIG)
        with mock.patch.dict(os.environ, {"TEST_ORACLE_TIMEOUT": "600"}):
            cfg = load_config(path)

        self.assertEqual(cfg.engine.oracle_timeout_seconds, 600)
        self.assertEqual(cfg.engine.liquidation_threshold, 60)
        self.assertEqual(cfg.engine.liquidation_bonus, 5)
        self.assertEqual(cfg.log_level, "DEBUG")
        self.assertEqual(cfg.network("test").debt_token_symbol, "USDX")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config(Path(self.tmp.name) / "missing.yaml")

    def test_unknown_network(self):
        with self.assertRaises(ValueError):
            load_config().network("mainnet")

    def test_defaults_fill_missing_engine_section(self):
        path = self.write("""
            networks:
              local:
                assets:
                  - symbol: WETH
                    initial_price: 2000
        """)
        cfg = load_config(path)
        self.assertEqual(cfg.engine, EngineParams())
        self.assertEqual(cfg.network("local").assets[0].feed_decimals, 8)

    def test_invalid_threshold(self):
        path = self.write("""
            engine:
              liquidation_threshold: 0
            networks:
              local:
                assets:
                  - symbol: WETH
                    initial_price: 2000
        """)
        with self.assertRaisesRegex(ValueError, "liquidation_threshold"):
            load_config(path)

    def test_invalid_timeout(self):
        path = self.write("""
            engine:
              oracle_timeout_seconds: 0
            networks:
              local:
                assets:
                  - symbol: WETH
                    initial_price: 2000
        """)
        with self.assertRaisesRegex(ValueError, "oracle_timeout_seconds"):
            load_config(path)

    def test_requires_a_network(self):
        path = self.write("log_level: INFO\n")
        with self.assertRaisesRegex(ValueError, "network"):
            load_config(path)

    def test_rejects_duplicate_symbols(self):
        path = self.write("""
            networks:
              local:
                assets:
                  - symbol: WETH
                    initial_price: 2000
                  - symbol: WETH
                    initial_price: 2100
        """)
        with self.assertRaisesRegex(ValueError, "duplicate"):
            load_config(path)

    def test_rejects_unpriced_asset(self):
        path = self.write("""
            networks:
              local:
                assets:
                  - symbol: WETH
        """)
        with self.assertRaisesRegex(ValueError, "initial_price"):
            load_config(path)

    def test_config_is_frozen(self):
        cfg = AppConfig()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            cfg.log_level = "DEBUG"
        with self.assertRaises(dataclasses.FrozenInstanceError):
            cfg.engine.liquidation_bonus = 20


if __name__ == "__main__":
    unittest.main()
