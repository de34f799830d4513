"""Pydantic models for the JSON the extraction prompts ask the model for.

A reply is validated in two steps. The response envelope for the category
(e.g. ActionItemsResponse) checks the overall shape and yields the raw
entries; each entry is then validated on its own against a Raw* record so a
malformed entry only drops itself.

The Raw* validators are lenient: blank text becomes None, unknown enum
values fall back to a default, lists and metrics keep only usable scalars.
Only a missing or blank required text field fails an entry.
"""
import math
from datetime import date
from typing import Annotated, Any, Callable, ClassVar, Dict, List, Optional

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    RootModel,
    ValidationError,
    ValidationInfo,
    WrapValidator,
    field_validator,
    model_validator,
)

from models.extraction_models import (
    ActionItem,
    BrainDumpCategoryEnum,
    BrainDumpEntry,
    InvestorUpdateDraft,
    PriorityEnum,
    ProductIdea,
    ProductIdeaCategoryEnum,
    ProgressLogEntry,
)
from utils.date_utils import parse_deadline


def _strip_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    return None


def _wrap_bare_string(value: Any) -> Any:
    return [value] if isinstance(value, str) else value


def _drop_blanks(entries: List[Optional[str]]) -> List[str]:
    return [entry for entry in entries if entry]


def _enum_key(value: Any) -> Any:
    """Lowercase and underscore a label, e.g. "New-Product" -> new_product."""
    if isinstance(value, str):
        return value.strip().lower().replace("-", "_").replace(" ", "_")
    return value


def _usable_metric(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, int)


def _clean_metrics(metrics: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key.strip(): value.strip() if isinstance(value, str) else value
        for key, value in metrics.items()
        if key.strip() and _usable_metric(value)
    }


def _fallback(default_factory: Callable[[], Any]) -> WrapValidator:
    """Replace an unusable value with a default instead of failing the entry."""
    def validate(value: Any, handler):
        try:
            return handler(value)
        except ValidationError:
            return default_factory()
    return WrapValidator(validate)


# Validators in Annotated wrap each other; the last one listed runs first.
RequiredText = Annotated[str, BeforeValidator(_strip_or_none)]
OptionalText = Annotated[Optional[str], BeforeValidator(_strip_or_none)]
StringList = Annotated[
    List[OptionalText],
    AfterValidator(_drop_blanks),
    BeforeValidator(_wrap_bare_string),
    _fallback(list),
]
Metrics = Annotated[Dict[str, Any], AfterValidator(_clean_metrics), _fallback(dict)]
Priority = Annotated[
    PriorityEnum,
    BeforeValidator(_enum_key),
    _fallback(lambda: PriorityEnum.medium),
]
ProductIdeaCategory = Annotated[
    ProductIdeaCategoryEnum,
    BeforeValidator(_enum_key),
    _fallback(lambda: ProductIdeaCategoryEnum.feature),
]
BrainDumpCategory = Annotated[
    BrainDumpCategoryEnum,
    BeforeValidator(_enum_key),
    _fallback(lambda: BrainDumpCategoryEnum.followup),
]


# --- Per-entry records ---

class RawRecord(BaseModel):
    """One entry as the model wrote it. Unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    def to_record(self):
        """Build the typed record, or None when the entry carries nothing."""
        raise NotImplementedError


class RawActionItem(RawRecord):
    task: RequiredText
    assignee: OptionalText = None
    deadline: Optional[date] = None
    priority: Priority = PriorityEnum.medium

    @field_validator("deadline", mode="before")
    @classmethod
    def resolve_deadline(cls, value: Any, info: ValidationInfo) -> Optional[date]:
        # Relative phrases resolve against the "today" passed in the validation context
        today = (info.context or {}).get("today")
        return parse_deadline(value, today=today)

    def to_record(self) -> ActionItem:
        # Status is never taken from the model; new items start open
        return ActionItem(
            task=self.task,
            assignee=self.assignee,
            deadline=self.deadline,
            priority=self.priority,
        )


class RawInvestorUpdate(RawRecord):
    subject: OptionalText = Field(
        default=None,
        validation_alias=AliasChoices("draft_subject", "subject")
    )
    body: OptionalText = Field(
        default=None,
        validation_alias=AliasChoices("draft_body", "body")
    )
    wins: StringList = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=dict)
    challenges: StringList = Field(default_factory=list)
    asks: StringList = Field(default_factory=list)

    def to_record(self) -> Optional[InvestorUpdateDraft]:
        draft = InvestorUpdateDraft(
            subject=self.subject or "",
            body=self.body or "",
            wins=self.wins,
            metrics=self.metrics,
            challenges=self.challenges,
            asks=self.asks,
        )
        return draft if draft.has_content() else None


class RawProgressLog(RawRecord):
    completed: StringList = Field(default_factory=list)
    in_progress: StringList = Field(default_factory=list)
    blocked: StringList = Field(default_factory=list)

    def to_record(self) -> Optional[ProgressLogEntry]:
        entry = ProgressLogEntry(
            completed=self.completed,
            in_progress=self.in_progress,
            blocked=self.blocked,
        )
        return entry if entry.has_content() else None


class RawProductIdea(RawRecord):
    idea: RequiredText
    category: ProductIdeaCategory = ProductIdeaCategoryEnum.feature
    priority: Priority = PriorityEnum.medium
    context: OptionalText = None

    def to_record(self) -> ProductIdea:
        return ProductIdea(
            idea=self.idea,
            category=self.category,
            priority=self.priority,
            context=self.context,
        )


class RawBrainDumpEntry(RawRecord):
    content: RequiredText
    category: BrainDumpCategory = BrainDumpCategoryEnum.followup
    participants: StringList = Field(default_factory=list)

    def to_record(self) -> BrainDumpEntry:
        return BrainDumpEntry(
            content=self.content,
            category=self.category,
            participants=self.participants,
        )


# --- Response envelopes ---

class ActionItemsResponse(BaseModel):
    """{"action_items": [...]}, also accepting {"items": [...]} or a bare array."""
    model_config = ConfigDict(extra="ignore")

    action_items: Optional[List[Any]] = None
    items: Optional[List[Any]] = None

    @model_validator(mode="before")
    @classmethod
    def accept_bare_array(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"action_items": data}
        return data

    @model_validator(mode="after")
    def require_entries(self) -> "ActionItemsResponse":
        if self.action_items is None and self.items is None:
            raise ValueError("Expected an action_items array")
        return self

    def entries(self) -> List[Any]:
        return self.action_items if self.action_items is not None else self.items


class ProductIdeasResponse(BaseModel):
    ideas: List[Any]

    def entries(self) -> List[Any]:
        return self.ideas


class BrainDumpResponse(BaseModel):
    items: List[Any]

    def entries(self) -> List[Any]:
        return self.items


class SingleRecordResponse(RootModel[Dict[str, Any]]):
    """A reply holding one record: the object itself, or nested under the category key."""
    wrapper_key: ClassVar[str] = ""

    def entries(self) -> List[Any]:
        nested = self.root.get(self.wrapper_key)
        return [nested if isinstance(nested, dict) else self.root]


class InvestorUpdateResponse(SingleRecordResponse):
    wrapper_key: ClassVar[str] = "investor_updates"


class ProgressLogResponse(SingleRecordResponse):
    wrapper_key: ClassVar[str] = "progress_logs"
