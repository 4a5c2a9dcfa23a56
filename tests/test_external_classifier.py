"""Tests for the fail-open external classifier adapter."""

import asyncio
from types import SimpleNamespace

from src.modules.moderation.services.external_classifier import ExternalCategories, ExternalClassifier


class _FakeAgent:
    def __init__(self, output=None, delay: float = 0.0, error: Exception | None = None):
        self.output = output
        self.delay = delay
        self.error = error
        self.prompts: list[str] = []
        self.cancelled = False

    async def run(self, user_prompt: str):
        self.prompts.append(user_prompt)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        return SimpleNamespace(output=self.output)


async def test_flags_are_returned():
    agent = _FakeAgent(output=ExternalCategories(hate=True, violence=True))
    categories = await ExternalClassifier(agent=agent, timeout=1).classify("some text")
    assert categories.hate and categories.violence
    assert not categories.sexual
    assert categories.flagged


async def test_disabled_classifier_flags_nothing():
    classifier = ExternalClassifier(agent=None)
    assert classifier.enabled is False
    assert (await classifier.classify("anything")).flagged is False


async def test_blank_text_skips_the_call():
    agent = _FakeAgent(output=ExternalCategories(hate=True))
    categories = await ExternalClassifier(agent=agent, timeout=1).classify("   ")
    assert categories.flagged is False
    assert agent.prompts == []


async def test_timeout_fails_open_and_cancels_the_call():
    agent = _FakeAgent(output=ExternalCategories(hate=True), delay=5)
    categories = await ExternalClassifier(agent=agent, timeout=0.05).classify("slow text")
    assert categories == ExternalCategories()
    assert agent.cancelled is True


async def test_transport_error_fails_open():
    agent = _FakeAgent(error=ConnectionError("unreachable"))
    categories = await ExternalClassifier(agent=agent, timeout=1).classify("text")
    assert categories.flagged is False


async def test_dict_output_is_validated_and_unknown_fields_ignored():
    agent = _FakeAgent(output={"hate": True, "self_harm": "yes", "spam": True})
    categories = await ExternalClassifier(agent=agent, timeout=1).classify("text")
    assert categories.hate is True
    assert categories.self_harm is False
    assert not hasattr(categories, "spam")


async def test_malformed_output_fails_open():
    agent = _FakeAgent(output="definitely not json")
    categories = await ExternalClassifier(agent=agent, timeout=1).classify("text")
    assert categories.flagged is False


def test_missing_fields_default_to_false():
    categories = ExternalCategories.model_validate({"harassment": True})
    assert categories.harassment is True
    assert categories.hate is False
    assert categories.self_harm is False
