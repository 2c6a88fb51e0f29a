# /mobilehub/services/message_analyzer.py

"""
Message analysis for inbound WhatsApp texts.

Turns a free-text customer message into structured entities (brand, model,
budget) and a single intent. Both steps are pure functions over ordered rule
tables in `mobilehub.config.rules`; the first rule that matches wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from mobilehub.config import rules
from mobilehub.models.domain import ExtractedEntities, Intent, MessageAnalysis
from mobilehub.services.query_builder import DEFAULT_SEARCH_PATH, build_api_endpoint, build_inventory_query

logger = logging.getLogger(__name__)


# --- Lexical extraction ---

def _canonical_brand(token: str) -> str:
    return rules.BRAND_ALIASES.get(token, token[:1].upper() + token[1:])


def _parse_amount(raw: str) -> int:
    """'50k' -> 50000, '1,20,000' -> 120000."""
    amount = raw.replace(",", "")
    if amount.endswith("k"):
        return int(amount[:-1]) * 1000
    return int(amount)


def extract_brand(text_lower: str) -> Optional[Tuple[str, str]]:
    """Returns (canonical brand, matched token) for the first brand token found."""
    for token in rules.BRAND_TOKENS:
        if token in text_lower:
            return _canonical_brand(token), token
    return None


def extract_model(text_lower: str) -> Optional[str]:
    for pattern in rules.MODEL_PATTERNS:
        match = pattern.search(text_lower)
        if match:
            return match.group(0).strip()
    return None


def extract_budget(text_lower: str) -> Optional[int]:
    for pattern in rules.BUDGET_PATTERNS:
        match = pattern.search(text_lower)
        if match:
            amount = _parse_amount(match.group(1))
            # Amounts beyond what the store can compare are treated as no budget.
            return amount if amount <= rules.MAX_PRICE_RUPEES else None
    return None


def extract(text: str) -> ExtractedEntities:
    """Pulls brand, model and budget out of a raw message. Never raises."""
    text_lower = (text or "").lower()
    keywords: List[str] = []

    brand = None
    brand_match = extract_brand(text_lower)
    if brand_match:
        brand, token = brand_match
        keywords.append(token)

    model = extract_model(text_lower)
    if model:
        keywords.append(model)

    budget = extract_budget(text_lower)
    if budget is not None:
        keywords.append(f"budget:{budget}")

    return ExtractedEntities(brand=brand, model=model, budget=budget, keywords=keywords)


# --- Intent classification ---

@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    action: str
    predicate: Callable[[str, ExtractedEntities], bool]


def _contains_any(*phrases: str) -> Callable[[str, ExtractedEntities], bool]:
    return lambda text_lower, _entities: any(p in text_lower for p in phrases)


INTENT_RULES: List[IntentRule] = [
    *(
        IntentRule(Intent(name), action, _contains_any(*phrases))
        for name, action, phrases in rules.KEYWORD_INTENT_RULES
    ),
    IntentRule(Intent.PRODUCT_SEARCH, "search_inventory", lambda _t, e: bool(e.brand or e.model)),
    IntentRule(Intent.BUDGET_SEARCH, "search_by_budget", lambda _t, e: e.budget is not None),
    IntentRule(Intent.GREETING, "send_welcome", _contains_any(*rules.GREETING_KEYWORDS)),
]

FALLBACK_RULE = IntentRule(Intent.GENERAL_INQUIRY, "search_inventory", lambda _t, _e: True)


def classify(text: str, entities: ExtractedEntities) -> Tuple[Intent, str]:
    """Returns exactly one (intent, suggested action) pair for any input."""
    text_lower = (text or "").lower()
    for rule in INTENT_RULES:
        if rule.predicate(text_lower, entities):
            return rule.intent, rule.action
    return FALLBACK_RULE.intent, FALLBACK_RULE.action


def analyze_message(text: str, result_limit: int = 5, search_path: str = DEFAULT_SEARCH_PATH) -> MessageAnalysis:
    """Runs extraction, classification and query building for one message."""
    entities = extract(text)
    intent, action = classify(text, entities)
    query = build_inventory_query(intent, entities, limit=result_limit)

    analysis = MessageAnalysis(
        intent=intent,
        suggested_action=action,
        entities=entities,
        query=query,
        api_endpoint=build_api_endpoint(query, search_path),
    )
    logger.debug(f"Analyzed message -> intent={intent.value}, keywords={entities.keywords}")
    return analysis
