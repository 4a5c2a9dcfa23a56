import asyncio
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_ai import Agent
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from src.core.config import settings
from src.core.exception import ExternalServiceError
from src.core.logging import get_logger

logger = get_logger(__name__)


class ExternalCategories(BaseModel):
    """Category flags returned by the external classifier.

    Unknown fields are ignored and anything that is not literally `true`
    counts as not flagged.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    hate: bool = False
    harassment: bool = False
    sexual: bool = False
    violence: bool = False
    self_harm: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def only_true_flags(cls, value: Any) -> bool:
        return value is True

    @property
    def flagged(self) -> bool:
        return self.hate or self.harassment or self.sexual or self.violence or self.self_harm


class ClassifierAgent(Protocol):
    async def run(self, user_prompt: str) -> Any: ...


CLASSIFIER_INSTRUCTIONS = """
You are a text classifier for a community platform where users share short horror stories,
creature descriptions and comments. Stories are often in Korean.

Classify the text into these categories. Set a category to true only when the text clearly
contains it; spooky or scary fiction on its own is NOT violence.

- hate: hateful content targeting a protected group
- harassment: harassment, bullying or threats against a person
- sexual: sexual content
- violence: graphic or glorified violence
- self_harm: promotion or instructions of self-harm or suicide
"""


class ExternalClassifier:
    """Adapter to the third-party text classifier (Gemini through pydantic-ai).

    Fail-open: timeouts, transport errors and malformed answers are logged and
    reported as "nothing flagged". One attempt per call, never retried.
    """

    def __init__(self, agent: ClassifierAgent | None = None, timeout: float = 3.0):
        self.agent = agent
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "ExternalClassifier":
        if not settings.external_classifier_configured:
            logger.info("External classifier disabled (no GOOGLE_API_KEY or MODERATION_EXTERNAL_ENABLED=false)")
            return cls(agent=None, timeout=settings.MODERATION_EXTERNAL_TIMEOUT_SECONDS)

        provider = GoogleProvider(api_key=settings.GOOGLE_API_KEY)
        agent = Agent(
            model=GoogleModel(model_name=settings.GEMINI_MODERATION_MODEL, provider=provider),
            output_type=ExternalCategories,
            system_prompt=CLASSIFIER_INSTRUCTIONS,
        )
        logger.debug(f"External classifier initialized with model: {settings.GEMINI_MODERATION_MODEL}")
        return cls(agent=agent, timeout=settings.MODERATION_EXTERNAL_TIMEOUT_SECONDS)

    @property
    def enabled(self) -> bool:
        return self.agent is not None

    async def classify(self, text: str) -> ExternalCategories:
        if self.agent is None or not text.strip():
            return ExternalCategories()

        try:
            categories = await self._call(text)
        except ExternalServiceError as e:
            logger.warning(f"External classifier failed, continuing without it: {e.message}")
            return ExternalCategories()

        if categories.flagged:
            logger.info(f"External classifier flagged text: {categories.model_dump()}")
        return categories

    async def _call(self, text: str) -> ExternalCategories:
        escaped_text = text.replace('"', '\\"')
        prompt = f'Text to classify: "{escaped_text}"'

        try:
            result = await asyncio.wait_for(self.agent.run(prompt), timeout=self.timeout)  # ty:ignore[possibly-missing-attribute]
        except TimeoutError as e:
            raise ExternalServiceError(f"timed out after {self.timeout}s") from e
        except Exception as e:
            raise ExternalServiceError(f"{type(e).__name__}: {e}") from e

        output = getattr(result, "output", None)
        if isinstance(output, ExternalCategories):
            return output

        try:
            return ExternalCategories.model_validate(output)
        except PydanticValidationError as e:
            raise ExternalServiceError(f"malformed response: {output!r}") from e
