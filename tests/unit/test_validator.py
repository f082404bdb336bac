"""Tests for response validation."""

import pytest

from solace.orchestration.validator import ResponseValidator


NEUTRAL_LONG_TEXT = (
    "The weather report lists wind speed, rain totals, and sunset times for the week. "
    "Expect cool mornings, light fog, and long evenings. Pack a jacket. "
    "The bus runs on the usual schedule."
)


@pytest.fixture
def validator():
    return ResponseValidator()


class TestResponseValidator:
    """Tests for ResponseValidator.validate."""

    def test_supportive_reply_is_appropriate(self, validator):
        result = validator.validate("I hear you, that sounds really difficult. What has been weighing on you most?")
        assert result.is_appropriate
        assert result.issues == []
        assert result.has_empathy

    def test_brief_reply_flagged(self, validator):
        result = validator.validate("Hi there!")
        assert not result.is_appropriate
        assert not result.has_harmful_content
        assert any("too brief" in issue for issue in result.issues)

    def test_harmful_phrase_flagged(self, validator):
        result = validator.validate("Just get over it, others have it worse than you do.")
        assert result.has_harmful_content
        assert len([i for i in result.issues if "harmful" in i]) == 2

    def test_long_reply_without_empathy_flagged(self, validator):
        assert len(NEUTRAL_LONG_TEXT) > 150
        result = validator.validate(NEUTRAL_LONG_TEXT)
        assert "Response may lack empathetic language or engagement" in result.issues
        assert not result.has_empathy

    def test_question_counts_as_engagement(self, validator):
        result = validator.validate(NEUTRAL_LONG_TEXT + " Which stop is yours?")
        assert "Response may lack empathetic language or engagement" not in result.issues

    def test_too_long_flagged(self, validator):
        result = validator.validate("I hear you. " * 200)
        assert any("too long" in issue for issue in result.issues)

    def test_medical_advice_flagged(self, validator):
        result = validator.validate("You have depression and should see someone about it soon.")
        assert "Contains medical advice or diagnosis" in result.issues
        assert not result.has_harmful_content

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_reply(self, validator, text):
        result = validator.validate(text)
        assert not result.is_appropriate
        assert result.issues == ["Empty or invalid response"]

    def test_to_dict(self, validator):
        data = validator.validate("Hi there!").to_dict()
        assert data["length"] == 9
        assert data["is_appropriate"] is False
