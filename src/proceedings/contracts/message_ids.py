import re

MESSAGE_ID_PATTERN = re.compile(r"^(.+)-(\d+)$")
FALLBACK_SEQUENCE = 1


def format_message_id(reference: str, sequence: int) -> str:
    if sequence < 0:
        raise ValueError("sequence must be >= 0")
    return f"{reference}-{sequence:02d}"


def parse_message_id(message_id: str) -> tuple[str, int] | None:
    match = MESSAGE_ID_PATTERN.match(message_id)
    if match is None:
        return None
    return match.group(1), int(match.group(2))


def reference_of(message_id: str) -> str | None:
    parsed = parse_message_id(message_id)
    return parsed[0] if parsed else None


def _sequence_of(reference: str, message_id: str) -> int | None:
    match = re.match(rf"^({re.escape(reference)})-(\d+)$", message_id)
    if match is None:
        return None
    return int(match.group(2))


def next_message_id(reference: str, existing_ids: list[str]) -> str:
    """Allocate the identifier following the most recently inserted one.

    Only the last identifier counts, not the numeric maximum. An unparsable
    last identifier is read as sequence 1, so the next one is ``-02``.
    """
    if not existing_ids:
        return format_message_id(reference, 0)

    last_sequence = _sequence_of(reference, existing_ids[-1])
    if last_sequence is None:
        last_sequence = FALLBACK_SEQUENCE
    return format_message_id(reference, last_sequence + 1)
