from src.modules.moderation.services.external_classifier import ExternalCategories, ExternalClassifier
from src.modules.moderation.services.lexical_filter import LexicalCheck, LexicalFilter
from src.modules.moderation.services.moderation_service import ModerationService
from src.modules.moderation.services.rule_engine import RuleEngine, RuleFlag, RuleVerdict

__all__ = [
    "ExternalCategories",
    "ExternalClassifier",
    "LexicalCheck",
    "LexicalFilter",
    "ModerationService",
    "RuleEngine",
    "RuleFlag",
    "RuleVerdict",
]
