"""Pydantic models for the smartify extraction pipeline.

These models are the typed records the normalizer produces from raw LLM
output. They are independent of the database mirror models so the pipeline
can run (preview) without touching the datastore.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional, Union
from datetime import date
from enum import Enum


class ExtractionCategory(str, Enum):
    """The five independent extraction domains."""
    action_items = "action_items"
    investor_updates = "investor_updates"
    progress_logs = "progress_logs"
    product_ideas = "product_ideas"
    brain_dump = "brain_dump"


class PriorityEnum(str, Enum):
    """Priority shared by action items and product ideas."""
    high = "high"
    medium = "medium"
    low = "low"


class ActionItemStatusEnum(str, Enum):
    open = "open"
    in_progress = "in_progress"
    done = "done"


class InvestorUpdateStatusEnum(str, Enum):
    draft = "draft"
    sent = "sent"


class ProductIdeaCategoryEnum(str, Enum):
    """Kind of product idea."""
    feature = "feature"
    improvement = "improvement"
    integration = "integration"
    pivot = "pivot"
    experiment = "experiment"
    new_product = "new_product"


class BrainDumpCategoryEnum(str, Enum):
    """Mutually exclusive brain dump buckets."""
    meeting = "meeting"
    blocker = "blocker"
    decision = "decision"
    question = "question"
    followup = "followup"


MetricValue = Union[str, int, float, bool]


class ActionItem(BaseModel):
    """An actionable task extracted from the transcript."""
    task: str = Field(
        min_length=1,
        description="Clear description of the task to be completed"
    )
    assignee: Optional[str] = Field(
        default=None,
        description="Person responsible for the task, if mentioned"
    )
    deadline: Optional[date] = Field(
        default=None,
        description="Deadline for the task, if one could be resolved"
    )
    priority: PriorityEnum = Field(default=PriorityEnum.medium)
    status: ActionItemStatusEnum = Field(default=ActionItemStatusEnum.open)


class InvestorUpdateDraft(BaseModel):
    """A drafted investor update email with its classified inputs."""
    subject: str = Field(default="", description="Generated email subject line")
    body: str = Field(default="", description="Generated multi-paragraph email body")
    wins: List[str] = Field(default_factory=list)
    metrics: Dict[str, MetricValue] = Field(default_factory=dict)
    challenges: List[str] = Field(default_factory=list)
    asks: List[str] = Field(default_factory=list)
    status: InvestorUpdateStatusEnum = Field(default=InvestorUpdateStatusEnum.draft)

    def has_content(self) -> bool:
        """Subject and body are generated, so only the classified lists count."""
        return bool(self.wins or self.metrics or self.challenges or self.asks)


class ProgressLogEntry(BaseModel):
    """Weekly progress buckets.

    week_of is filled in by the pipeline at commit time, never by the model.
    """
    week_of: Optional[date] = Field(default=None)
    completed: List[str] = Field(default_factory=list)
    in_progress: List[str] = Field(default_factory=list)
    blocked: List[str] = Field(default_factory=list)

    def has_content(self) -> bool:
        return bool(self.completed or self.in_progress or self.blocked)


class ProductIdea(BaseModel):
    """A product idea, feature request or improvement suggestion."""
    idea: str = Field(min_length=1)
    category: ProductIdeaCategoryEnum = Field(default=ProductIdeaCategoryEnum.feature)
    priority: PriorityEnum = Field(default=PriorityEnum.medium)
    context: Optional[str] = Field(
        default=None,
        description="Why the idea came up, the problem it solves"
    )
    status: str = Field(default="idea")
    votes: int = Field(default=0)


class BrainDumpEntry(BaseModel):
    """A freeform note assigned to exactly one category."""
    content: str = Field(min_length=1)
    category: BrainDumpCategoryEnum = Field(default=BrainDumpCategoryEnum.followup)
    participants: List[str] = Field(default_factory=list)


class ExtractionCounts(BaseModel):
    """Per-category counts, serialized in camelCase for the API."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action_items: int = 0
    investor_updates: int = 0
    progress_logs: int = 0
    product_ideas: int = 0
    brain_dump: int = 0

    @property
    def total(self) -> int:
        return (
            self.action_items
            + self.investor_updates
            + self.progress_logs
            + self.product_ideas
            + self.brain_dump
        )


class ExtractionResult(BaseModel):
    """Normalized items for every category from a single extraction run.

    Investor updates and progress logs hold at most one record each.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action_items: List[ActionItem] = Field(default_factory=list)
    investor_updates: List[InvestorUpdateDraft] = Field(default_factory=list)
    progress_logs: List[ProgressLogEntry] = Field(default_factory=list)
    product_ideas: List[ProductIdea] = Field(default_factory=list)
    brain_dump: List[BrainDumpEntry] = Field(default_factory=list)

    def items_for(self, category: ExtractionCategory) -> list:
        return getattr(self, category.value)

    def counts(self) -> ExtractionCounts:
        return ExtractionCounts(
            **{category.value: len(self.items_for(category)) for category in ExtractionCategory}
        )


class ExtractionPreview(BaseModel):
    """Dry-run outcome: counts plus everything that would be committed."""
    counts: ExtractionCounts = Field(default_factory=ExtractionCounts)
    items: ExtractionResult = Field(default_factory=ExtractionResult)
    already_processed: bool = Field(
        default=False,
        description="True when the note was smartified and not edited since"
    )


class CommitResult(BaseModel):
    """Outcome of a commit: persisted counts and categories whose insert failed."""
    extracted: ExtractionCounts = Field(default_factory=ExtractionCounts)
    failed_categories: List[ExtractionCategory] = Field(default_factory=list)
