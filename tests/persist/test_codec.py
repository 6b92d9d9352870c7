import json
import unittest
from datetime import datetime, timedelta, timezone

from proceedings.contracts.snapshot_versions import SnapshotError, SnapshotVersionError
from proceedings.contracts.status_policy import ProceedingStatus
from proceedings.persist.codec import Snapshot, decode_date, decode_snapshot, encode_date, encode_snapshot
from proceedings.store.models import Message, Proceeding


def _proceeding() -> Proceeding:
    first = Message(
        id="2024-ABC1234-00",
        reference="2024-ABC1234",
        date=datetime(2024, 1, 1, 9, 30, 15, 250000, tzinfo=timezone.utc),
        type="access",
        slug="acme",
        correspondent_address={"name": "Acme", "city": "Berlin"},
        correspondent_email="dpo@acme.example",
        transport_medium="email",
        subject="Request",
        content="Dear Sir or Madam, …",
        sent_by_me=True,
    )
    second = Message(
        id="2024-ABC1234-01",
        reference="2024-ABC1234",
        date=datetime(2024, 1, 5, tzinfo=timezone(timedelta(hours=2))),
        type="response",
        sent_by_me=False,
    )
    return Proceeding(
        reference="2024-ABC1234",
        messages={first.id: first, second.id: second},
        status=ProceedingStatus.ACTION_NEEDED,
    )


class SnapshotCodecTests(unittest.TestCase):
    def test_round_trip_preserves_dates_and_fields(self):
        original = _proceeding()
        raw = encode_snapshot(Snapshot(proceedings={original.reference: original}, migrated_legacy_requests=True))

        decoded = decode_snapshot(raw)

        restored = decoded.proceedings["2024-ABC1234"]
        self.assertTrue(decoded.migrated_legacy_requests)
        self.assertEqual(restored.status, ProceedingStatus.ACTION_NEEDED)
        self.assertEqual(list(restored.messages), list(original.messages))
        for message_id, message in original.messages.items():
            self.assertEqual(restored.messages[message_id].date, message.date)
            self.assertEqual(restored.messages[message_id].to_dict() | {"date": None}, message.to_dict() | {"date": None})
        self.assertEqual(encode_snapshot(decoded), raw)

    def test_snapshot_layout_uses_wire_keys(self):
        original = _proceeding()
        payload = json.loads(encode_snapshot(Snapshot(proceedings={original.reference: original})))

        self.assertEqual(payload["version"], 0)
        self.assertEqual(payload["state"]["_migratedLegacyRequests"], False)
        message = payload["state"]["proceedings"]["2024-ABC1234"]["messages"]["2024-ABC1234-00"]
        self.assertEqual(message["date"], "2024-01-01T09:30:15.250Z")
        self.assertIs(message["sentByMe"], True)
        reply = payload["state"]["proceedings"]["2024-ABC1234"]["messages"]["2024-ABC1234-01"]
        self.assertNotIn("slug", reply)
        self.assertEqual(reply["date"], "2024-01-04T22:00:00.000Z")

    def test_decode_date_accepts_iso_text_and_epoch_millis(self):
        expected = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(decode_date("2024-01-01T00:00:00.000Z"), expected)
        self.assertEqual(decode_date("2024-01-01T01:00:00+01:00"), expected)
        self.assertEqual(decode_date("2024-01-01T00:00:00"), expected)
        self.assertEqual(decode_date(1704067200000), expected)
        self.assertEqual(encode_date(expected), "2024-01-01T00:00:00.000Z")

    def test_decode_date_rejects_garbage(self):
        for value in ("yesterday", None, True):
            with self.subTest(value=value), self.assertRaises(SnapshotError):
                decode_date(value)

    def test_missing_version_is_treated_as_zero(self):
        decoded = decode_snapshot(json.dumps({"state": {"proceedings": {}}}))
        self.assertEqual(decoded.version, 0)
        self.assertEqual(decoded.proceedings, {})
        self.assertFalse(decoded.migrated_legacy_requests)

    def test_registered_migration_runs_before_proceedings_are_built(self):
        seen_dates = []

        def rename_requests(state):
            proceedings = state.pop("requests")
            for proceeding in proceedings.values():
                for message in proceeding["messages"].values():
                    seen_dates.append(message["date"])
                    message["sentByMe"] = message.pop("outgoing")
            return {**state, "proceedings": proceedings}

        raw = json.dumps(
            {
                "state": {
                    "requests": {
                        "A": {
                            "status": "waitingForResponse",
                            "messages": {
                                "A-00": {"id": "A-00", "reference": "A", "date": "2024-01-01T00:00:00.000Z", "type": "access", "outgoing": True}
                            },
                        }
                    }
                },
                "version": 0,
            }
        )

        decoded = decode_snapshot(raw, current_version=1, migrations={0: rename_requests})

        self.assertEqual(seen_dates, ["2024-01-01T00:00:00.000Z"])
        self.assertEqual(decoded.version, 0)
        message = decoded.proceedings["A"].messages["A-00"]
        self.assertTrue(message.sent_by_me)
        self.assertEqual(message.date, datetime(2024, 1, 1, tzinfo=timezone.utc))

    def test_partial_state_without_proceedings(self):
        decoded = decode_snapshot(json.dumps({"state": {"_migratedLegacyRequests": True}, "version": 0}))
        self.assertEqual(decoded.proceedings, {})
        self.assertTrue(decoded.migrated_legacy_requests)

    def test_rejects_malformed_snapshots(self):
        for raw in ("not json", "[]", json.dumps({"version": 0}), json.dumps({"state": {}, "version": "0"})):
            with self.subTest(raw=raw), self.assertRaises(SnapshotError):
                decode_snapshot(raw)

    def test_rejects_malformed_proceedings(self):
        raw = json.dumps({"state": {"proceedings": {"A": {"messages": {"A-00": {"date": "2024-01-01"}}}}}, "version": 0})
        with self.assertRaises(SnapshotError):
            decode_snapshot(raw)

    def test_rejects_future_version(self):
        with self.assertRaises(SnapshotVersionError):
            decode_snapshot(json.dumps({"state": {"proceedings": {}}, "version": 99}))


if __name__ == "__main__":
    unittest.main()
