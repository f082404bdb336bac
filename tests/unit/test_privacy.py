"""Tests for personal identifier redaction."""

import pytest

from solace.utils.privacy import PrivacyFilter


@pytest.fixture
def privacy():
    return PrivacyFilter()


class TestPrivacyFilter:
    """Tests for PrivacyFilter.anonymize."""

    def test_email_redacted(self, privacy):
        text, detected = privacy.anonymize("write to jane.doe@example.com please")
        assert text == "write to [email] please"
        assert detected

    @pytest.mark.parametrize("number", ["555-123-4567", "(555) 123-4567", "+1 555 123 4567"])
    def test_phone_redacted(self, privacy, number):
        text, detected = privacy.anonymize(f"call me at {number} tonight")
        assert "[phone]" in text
        assert "4567" not in text
        assert detected

    def test_long_digit_run_redacted(self, privacy):
        text, detected = privacy.anonymize("my card is 4111111111111111")
        assert text == "my card is [number]"
        assert detected

    def test_plain_text_unchanged(self, privacy):
        text, detected = privacy.anonymize("I'm 21 and I have 3 exams")
        assert text == "I'm 21 and I have 3 exams"
        assert not detected

    def test_empty_text(self, privacy):
        assert privacy.anonymize("") == ("", False)
