import asyncio
import random
import string
import time
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.exception import InternalPipelineError
from src.core.logging import get_logger
from src.core.services.best_effort import BestEffortWriter
from src.modules.moderation.constants import (
    CONFIDENCE_EXTERNAL,
    CONFIDENCE_PROFANITY,
    CONFIDENCE_SYSTEM_ERROR,
    REASON_HARASSMENT,
    REASON_HATE,
    REASON_PROFANITY,
    REASON_SELF_HARM,
    REASON_SEXUAL,
    REASON_SYSTEM_ERROR,
    REASON_VIOLENCE,
)
from src.modules.moderation.repository import ModerationLogRepository
from src.modules.moderation.schemas import ModerationRequest, ModerationResult
from src.modules.moderation.services.external_classifier import ExternalCategories, ExternalClassifier
from src.modules.moderation.services.lexical_filter import LexicalCheck, LexicalFilter
from src.modules.moderation.services.rule_engine import RuleEngine, RuleVerdict

logger = get_logger(__name__)


def generate_moderation_id() -> str:
    """Correlation token for logs and dashboards; unique in practice, not guaranteed."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"mod_{int(time.time() * 1000)}_{suffix}"


class ModerationService:
    """
    Combines the lexical filter, the rule engine and the external classifier
    into a single moderation decision.

    The external classifier runs concurrently and fails open. Any other
    unexpected failure fails closed with a "moderation system error" rejection.
    """

    def __init__(
        self,
        lexical_filter: LexicalFilter | None = None,
        rule_engine: RuleEngine | None = None,
        external_classifier: ExternalClassifier | None = None,
        log_writer: BestEffortWriter | None = None,
    ):
        self.lexical_filter = lexical_filter or LexicalFilter(extra_words=settings.MODERATION_EXTRA_PROFANITY)
        self.rule_engine = rule_engine or RuleEngine()
        self.external_classifier = external_classifier or ExternalClassifier(agent=None)
        self.log_writer = log_writer

    async def moderate(self, request: ModerationRequest) -> ModerationResult:
        external_task: asyncio.Task | None = None
        try:
            external_task = asyncio.create_task(self.external_classifier.classify(request.text))

            lexical = self.lexical_filter.check(request.text)
            verdict = self.rule_engine.evaluate(request.text, request.content_type)
            categories = await self._join_external(external_task)

            result = self._aggregate(lexical, categories, verdict)
        except Exception as e:
            logger.error(f"Moderation pipeline failed, rejecting content: {type(e).__name__}: {e}", exc_info=True)
            result = self._system_error_result(request.text)
        finally:
            if external_task is not None and not external_task.done():
                external_task.cancel()

        if result.is_approved:
            logger.debug(f"Content approved: {result.moderation_id} type={request.content_type.value}")
        else:
            logger.info(
                f"Content rejected: {result.moderation_id} type={request.content_type.value} reasons={result.reasons}"
            )

        self._log_decision(request, result)
        return result

    async def _join_external(self, task: asyncio.Task) -> ExternalCategories:
        timeout = getattr(self.external_classifier, "timeout", settings.MODERATION_EXTERNAL_TIMEOUT_SECONDS)
        try:
            return await asyncio.wait_for(task, timeout=timeout)
        except TimeoutError:
            logger.warning(f"External classifier did not answer within {timeout}s, ignoring it")
        except Exception as e:
            logger.warning(f"External classifier raised {type(e).__name__}: {e}, ignoring it")
        return ExternalCategories()

    def _aggregate(
        self, lexical: LexicalCheck, categories: ExternalCategories, verdict: RuleVerdict
    ) -> ModerationResult:
        reasons: list[str] = []
        confidence = 1.0

        def add(reason: str, contribution: float) -> None:
            nonlocal confidence
            if reason not in reasons:
                reasons.append(reason)
            confidence = min(confidence, contribution)

        if lexical.is_profane:
            add(REASON_PROFANITY, CONFIDENCE_PROFANITY)

        for flagged, reason in (
            (categories.hate, REASON_HATE),
            (categories.harassment, REASON_HARASSMENT),
            (categories.sexual, REASON_SEXUAL),
            (categories.violence, REASON_VIOLENCE),
            (categories.self_harm, REASON_SELF_HARM),
        ):
            if flagged:
                add(reason, CONFIDENCE_EXTERNAL)

        for flag in verdict.flags:
            add(flag.reason, flag.confidence)

        try:
            return ModerationResult(
                is_approved=not reasons,
                confidence=max(0.0, min(1.0, confidence)),
                reasons=reasons,
                filtered_text=lexical.cleaned,
                moderation_id=generate_moderation_id(),
            )
        except PydanticValidationError as e:
            raise InternalPipelineError(f"inconsistent moderation result: {e}") from e

    @staticmethod
    def _system_error_result(text: str) -> ModerationResult:
        return ModerationResult(
            is_approved=False,
            confidence=CONFIDENCE_SYSTEM_ERROR,
            reasons=[REASON_SYSTEM_ERROR],
            filtered_text=text,
            moderation_id=f"mod_error_{int(time.time() * 1000)}",
        )

    def _log_decision(self, request: ModerationRequest, result: ModerationResult) -> None:
        if self.log_writer is None:
            return

        snapshot = {
            "moderation_id": result.moderation_id,
            "content_text": request.text[: settings.MODERATION_LOG_TEXT_MAX_LENGTH],
            "content_type": request.content_type,
            "is_approved": result.is_approved,
            "confidence": result.confidence,
            "reasons": list(result.reasons),
            "created_at": datetime.now(UTC),
        }

        async def save(session: AsyncSession) -> None:
            await ModerationLogRepository(session).log_moderation_check(**snapshot)

        self.log_writer.submit("moderation_log", save)
