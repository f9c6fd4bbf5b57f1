from __future__ import annotations

from storeconfig._redact import mask_token, redact_for_log


def test_mask_token() -> None:
    assert mask_token("RPNrrDYtnke+OHNLfy74/A==") == "RPNrrDYtnk..."
    assert mask_token("ABC==") == "AB..."
    assert mask_token("") == "<none>"
    assert mask_token(None) == "<none>"


def test_redact_for_log_masks_tokens_and_redacts_secrets() -> None:
    payload = {
        "id": 1001,
        "token": "RPNrrDYtnke+OHNLfy74/A==",
        "password": "pw",
        "nested": {"locationToken": "ZZZZZZZZZZZZZZZZ", "database_url": "mssql://u:p@host/db"},
        "rows": [{"Authorization": "Bearer abc"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["id"] == 1001
    assert redacted["token"] == "RPNrrDYtnk..."
    assert redacted["password"] == "<redacted>"
    assert redacted["nested"]["locationToken"] == "ZZZZZZZZZZ..."
    assert redacted["nested"]["database_url"] == "<redacted>"
    assert redacted["rows"][0]["Authorization"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
