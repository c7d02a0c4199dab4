import logging
from typing import List, NamedTuple, Sequence, Tuple

from src.api.schemas import ClassificationResult
from src.interfaces.classifier_provider import ClassifierProvider

logger = logging.getLogger(__name__)


class KeywordRule(NamedTuple):
    keywords: Tuple[str, ...]
    category: str
    confidence: float


# Order matters: the first rule with a matching keyword wins.
DEFAULT_RULES: List[KeywordRule] = [
    KeywordRule(("payment", "invoice", "pago", "factura"), "Facturación", 0.95),
    KeywordRule(("wifi", "error", "screen", "pantalla"), "Soporte Técnico", 0.88),
    KeywordRule(("contract", "vacation", "contrato", "vacaciones"), "Recursos Humanos", 0.92),
]
FALLBACK_CATEGORY = "Otros"
FALLBACK_CONFIDENCE = 0.50


class KeywordRuleAdapter(ClassifierProvider):
    """
    Offline stand-in for the model server.

    Runs case-insensitive substring checks against the description. There is
    no scoring and no rule combination, so it only suits demos and local
    development.
    """

    strategy = "local"

    def __init__(
        self,
        rules: Sequence[KeywordRule] = DEFAULT_RULES,
        fallback_category: str = FALLBACK_CATEGORY,
        fallback_confidence: float = FALLBACK_CONFIDENCE,
    ) -> None:
        self.rules = list(rules)
        self.fallback_category = fallback_category
        self.fallback_confidence = fallback_confidence
        logger.info(f"Keyword Adapter initialized with {len(self.rules)} rules (fallback: '{fallback_category}').")

    def classify_ticket(self, description: str) -> ClassificationResult:
        text = description.lower()

        category, confidence = self.fallback_category, self.fallback_confidence
        for rule in self.rules:
            if any(keyword in text for keyword in rule.keywords):
                category, confidence = rule.category, rule.confidence
                break

        logger.debug(f"Keyword match -> {category} ({confidence})")
        return ClassificationResult(
            category=category,
            category_label=category,
            confidence=confidence,
            top3=[(category, confidence)],
        )
