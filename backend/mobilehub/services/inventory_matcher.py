# /mobilehub/services/inventory_matcher.py

"""
Inventory Matcher.

Runs a structured InventoryQuery against the inventory store. When nothing
matches exactly, a relaxation cascade looks for alternatives:

1. same_brand     - keep the brand, drop every other filter (ascending price)
2. price_relaxed  - drop the brand, allow up to budget x factor (ascending price)
3. newest         - no filters, most recently listed first

The first stage that returns anything wins. Stages that do not apply to the
query (no brand, no budget) are skipped without touching the store.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from mobilehub.config import rules, strings
from mobilehub.config.settings import settings
from mobilehub.models.domain import InventoryItem, InventoryQuery, MatchResult, SortOrder
from mobilehub.services.db_service import db_service
from mobilehub.services.inventory_store import AbstractInventoryStore
from mobilehub.utils.metrics import inventory_queries_counter

logger = logging.getLogger(__name__)


@dataclass
class MatcherConfig:
    """Tunables for the relaxation cascade."""
    suggestion_limit: int = 3
    budget_relaxation_factor: float = 1.2


@dataclass(frozen=True)
class RelaxationStage:
    name: str
    applies: Callable[[InventoryQuery], bool]
    relax: Callable[[InventoryQuery, MatcherConfig], InventoryQuery]


def _same_brand(query: InventoryQuery, config: MatcherConfig) -> InventoryQuery:
    return InventoryQuery(
        brand=query.brand,
        status=rules.STATUS_AVAILABLE,
        limit=config.suggestion_limit,
        sort=SortOrder.PRICE_ASC,
    )


def _price_relaxed(query: InventoryQuery, config: MatcherConfig) -> InventoryQuery:
    return InventoryQuery(
        max_price=min(round(query.max_price * config.budget_relaxation_factor), rules.MAX_PRICE_RUPEES),
        status=rules.STATUS_AVAILABLE,
        limit=config.suggestion_limit,
        sort=SortOrder.PRICE_ASC,
    )


def _newest(query: InventoryQuery, config: MatcherConfig) -> InventoryQuery:
    return InventoryQuery(
        status=rules.STATUS_AVAILABLE,
        limit=config.suggestion_limit,
        sort=SortOrder.NEWEST,
    )


RELAXATION_STAGES: List[RelaxationStage] = [
    RelaxationStage("same_brand", lambda q: bool(q.brand), _same_brand),
    RelaxationStage("price_relaxed", lambda q: q.max_price is not None, _price_relaxed),
    # An unfiltered primary query already was the catch-all.
    RelaxationStage("newest", lambda q: not q.is_unfiltered, _newest),
]


class InventoryMatcher:
    def __init__(self, store: AbstractInventoryStore, config: MatcherConfig | None = None):
        self.store = store
        self.config = config or MatcherConfig()

    async def _run(self, stage: str, query: InventoryQuery) -> List[InventoryItem]:
        items = await self.store.find_phones(query)
        inventory_queries_counter.labels(stage=stage, status="hit" if items else "miss").inc()
        return items

    async def find_exact(self, query: InventoryQuery) -> List[InventoryItem]:
        """
        Primary lookup. An unfiltered query selects the most recently listed
        items; exact matches are always returned in ascending price order.
        """
        if query.is_unfiltered:
            recent = await self._run("exact", query.model_copy(update={"sort": SortOrder.NEWEST}))
            return sorted(recent, key=lambda item: item.selling_price_paise)
        return await self._run("exact", query.model_copy(update={"sort": SortOrder.PRICE_ASC}))

    async def match(self, query: InventoryQuery) -> MatchResult:
        """Exact matches when there are any, otherwise the first non-empty relaxation stage."""
        matches = await self.find_exact(query)
        if matches:
            return MatchResult(matches=matches, message=strings.MATCH_HEADLINE_DEFAULT.format(count=len(matches)))

        for stage in RELAXATION_STAGES:
            if not stage.applies(query):
                continue
            suggestions = await self._run(stage.name, stage.relax(query, self.config))
            if suggestions:
                logger.info(f"No exact match; {len(suggestions)} suggestion(s) from stage '{stage.name}'")
                return MatchResult(
                    suggestions=suggestions,
                    relaxation_stage=stage.name,
                    message=strings.SUGGESTION_HEADLINE,
                )

        logger.info("No exact match and no suggestions available")
        return MatchResult(message=strings.NO_MATCH_MESSAGE)


# Globally accessible instance
inventory_matcher = InventoryMatcher(
    db_service,
    MatcherConfig(
        suggestion_limit=settings.suggestion_limit,
        budget_relaxation_factor=settings.budget_relaxation_factor,
    ),
)
