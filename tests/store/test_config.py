import os
import unittest
from unittest.mock import patch

from proceedings.contracts.privacy_gate import PrivacyAction


class ProceedingsConfigTests(unittest.TestCase):
    def test_default_config_values(self):
        from proceedings.store.config import get_proceedings_config

        with patch.dict(os.environ, {}, clear=True):
            cfg = get_proceedings_config()

        self.assertEqual(cfg.storage, "json")
        self.assertEqual(cfg.state_dir, ".proceedings")
        self.assertEqual(cfg.sqlite_path, ".proceedings/proceedings.db")
        self.assertEqual(cfg.store_name, "Datenanfragen.de-proceedings")
        self.assertEqual(cfg.overdue_days, 32)
        self.assertEqual(cfg.language, "en")
        self.assertEqual(cfg.denied_actions, frozenset())

    def test_env_overrides_defaults(self):
        from proceedings.store.config import get_proceedings_config

        with patch.dict(
            os.environ,
            {
                "PROCEEDINGS_STORAGE": "SQLite",
                "PROCEEDINGS_STATE_DIR": "data/state",
                "PROCEEDINGS_SQLITE_PATH": "data/p.sqlite3",
                "PROCEEDINGS_STORE_NAME": "custom",
                "PROCEEDINGS_OVERDUE_DAYS": "45",
                "PROCEEDINGS_LANGUAGE": "de",
                "PROCEEDINGS_DENIED_ACTIONS": "save_my_requests",
            },
            clear=False,
        ):
            cfg = get_proceedings_config()

        self.assertEqual(cfg.storage, "sqlite")
        self.assertEqual(cfg.state_dir, "data/state")
        self.assertEqual(cfg.sqlite_path, "data/p.sqlite3")
        self.assertEqual(cfg.store_name, "custom")
        self.assertEqual(cfg.overdue_days, 45)
        self.assertEqual(cfg.language, "de")
        self.assertEqual(cfg.denied_actions, frozenset({PrivacyAction.SAVE_MY_REQUESTS}))

    def test_invalid_values_raise(self):
        from proceedings.store.config import get_proceedings_config

        for env in (
            {"PROCEEDINGS_OVERDUE_DAYS": "soon"},
            {"PROCEEDINGS_OVERDUE_DAYS": "0"},
            {"PROCEEDINGS_STORAGE": "redis"},
            {"PROCEEDINGS_DENIED_ACTIONS": "nope"},
        ):
            with self.subTest(env=env), patch.dict(os.environ, env, clear=False):
                with self.assertRaises(ValueError):
                    get_proceedings_config()


if __name__ == "__main__":
    unittest.main()
