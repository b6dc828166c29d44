import pytest

from nexusbootstrap.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("identity_provider_unavailable", attempts="10")

    assert "did not respond after 10 attempt(s)." in message
    assert "Suggested action:" in message


def test_actionable_error_unknown_code_raises_key_error():
    with pytest.raises(KeyError):
        actionable_error("not_a_code")
