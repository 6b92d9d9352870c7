import unittest

from proceedings.contracts.snapshot_versions import (
    CURRENT_VERSION,
    SnapshotVersionError,
    migrate_state,
)


class SnapshotVersionPolicyTests(unittest.TestCase):
    def test_current_version_passes_through_unchanged(self):
        state = {"proceedings": {}, "_migratedLegacyRequests": False}
        self.assertIs(migrate_state(state, CURRENT_VERSION), state)

    def test_applies_registered_steps_in_order(self):
        steps = {
            0: lambda state: {**state, "trail": state.get("trail", []) + [0]},
            1: lambda state: {**state, "trail": state["trail"] + [1]},
        }
        migrated = migrate_state({"proceedings": {}}, 0, current_version=2, migrations=steps)
        self.assertEqual(migrated["trail"], [0, 1])

    def test_missing_step_is_rejected(self):
        with self.assertRaises(SnapshotVersionError):
            migrate_state({}, 0, current_version=1, migrations={})

    def test_newer_snapshot_is_rejected(self):
        with self.assertRaises(SnapshotVersionError):
            migrate_state({}, CURRENT_VERSION + 1)


if __name__ == "__main__":
    unittest.main()
