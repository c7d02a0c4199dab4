import logging
import os
from typing import Any, Dict

from src.adapters.keyword_adapter import KeywordRuleAdapter
from src.adapters.remote_adapter import RemoteClassifierAdapter
from src.core.config import get_categories, get_classifier_settings
from src.interfaces.classifier_provider import ClassifierProvider

logger = logging.getLogger(__name__)


def build_classifier(config: Dict[str, Any]) -> ClassifierProvider:
    """
    Picks the classification strategy for this deployment.

    The remote strategy never falls back to the keyword stub: a missing
    ML_API_URL surfaces as a 502 on every request instead.
    """
    settings = get_classifier_settings(config)

    if settings["strategy"] == "local":
        logger.info("Using local keyword classifier.")
        return KeywordRuleAdapter()

    return RemoteClassifierAdapter(
        base_url=os.getenv("ML_API_URL"),
        timeout_seconds=settings["timeout_seconds"],
        categories=get_categories(config),
    )
