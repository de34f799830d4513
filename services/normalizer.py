"""Normalizer for raw LLM extraction output.

Validates each loosely-typed entry a model returns against its Raw* model
and converts it to the typed record in models.extraction_models. Invalid
optional fields are nulled or defaulted by the validators; only a missing
or blank required text field (task / idea / content) drops an item.
"""
import logging
from datetime import date
from typing import Any, List, Optional

from pydantic import ValidationError

from models.extraction_models import (
    ActionItem,
    BrainDumpEntry,
    ExtractionCategory,
    InvestorUpdateDraft,
    ProductIdea,
    ProgressLogEntry,
)
from models.raw_extraction_models import (
    RawActionItem,
    RawBrainDumpEntry,
    RawInvestorUpdate,
    RawProductIdea,
    RawProgressLog,
)

logger = logging.getLogger(__name__)

RAW_RECORD_MODELS = {
    ExtractionCategory.action_items: RawActionItem,
    ExtractionCategory.investor_updates: RawInvestorUpdate,
    ExtractionCategory.progress_logs: RawProgressLog,
    ExtractionCategory.product_ideas: RawProductIdea,
    ExtractionCategory.brain_dump: RawBrainDumpEntry,
}


def normalize(category: ExtractionCategory, raw_item: Any, today: Optional[date] = None):
    """Normalize one raw item for a category; returns None when the item is dropped."""
    try:
        raw = RAW_RECORD_MODELS[category].model_validate(raw_item, context={"today": today})
    except ValidationError as e:
        logger.debug(f"Dropped raw item: category={category.value}, errors={e.error_count()}")
        return None
    return raw.to_record()


def normalize_action_item(raw: Any, today: Optional[date] = None) -> Optional[ActionItem]:
    return normalize(ExtractionCategory.action_items, raw, today=today)


def normalize_investor_update(raw: Any, today: Optional[date] = None) -> Optional[InvestorUpdateDraft]:
    # A draft with nothing behind it is "nothing found", not a record
    return normalize(ExtractionCategory.investor_updates, raw, today=today)


def normalize_progress_log(raw: Any, today: Optional[date] = None) -> Optional[ProgressLogEntry]:
    return normalize(ExtractionCategory.progress_logs, raw, today=today)


def normalize_product_idea(raw: Any, today: Optional[date] = None) -> Optional[ProductIdea]:
    return normalize(ExtractionCategory.product_ideas, raw, today=today)


def normalize_brain_dump(raw: Any, today: Optional[date] = None) -> Optional[BrainDumpEntry]:
    return normalize(ExtractionCategory.brain_dump, raw, today=today)


def normalize_batch(category: ExtractionCategory, raw_items: List[Any], today: Optional[date] = None) -> list:
    """Normalize a batch, dropping invalid items without aborting the rest."""
    items = []
    for raw in raw_items:
        item = normalize(category, raw, today=today)
        if item is None:
            continue
        items.append(item)

    dropped = len(raw_items) - len(items)
    if dropped:
        logger.info(
            f"Normalization dropped items: category={category.value}, "
            f"kept={len(items)}, dropped={dropped}"
        )
    return items
