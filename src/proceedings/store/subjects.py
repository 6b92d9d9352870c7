from typing import Callable

SubjectLookup = Callable[[str, str | None], str]

FALLBACK_LANGUAGE = "en"

SUBJECT_LINES: dict[str, dict[str, str]] = {
    "en": {
        "letter-subject-access": "Request to access personal data according to Art. 15 GDPR",
        "letter-subject-erasure": "Request for erasure of personal data according to Art. 17 GDPR",
        "letter-subject-rectification": "Request for rectification of personal data according to Art. 16 GDPR",
        "letter-subject-objection": "Objection to processing of personal data according to Art. 21 GDPR",
    },
    "de": {
        "letter-subject-access": "Anfrage bezüglich Auskunft nach Art. 15 DSGVO",
        "letter-subject-erasure": "Antrag auf Löschung nach Art. 17 DSGVO",
        "letter-subject-rectification": "Antrag auf Berichtigung nach Art. 16 DSGVO",
        "letter-subject-objection": "Widerspruch gegen die Verarbeitung nach Art. 21 DSGVO",
    },
}


def subject_key(request_type: str) -> str:
    return f"letter-subject-{request_type}"


def lookup_subject(key: str, language: str | None = None) -> str:
    """Translate a subject key, falling back to English and then to the key itself."""
    for candidate in (language, FALLBACK_LANGUAGE):
        if candidate and key in SUBJECT_LINES.get(candidate, {}):
            return SUBJECT_LINES[candidate][key]
    return key
