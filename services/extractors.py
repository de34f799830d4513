"""Category extractors for the smartify pipeline.

Each extractor owns one prompt, makes one call to the language model,
validates the reply against its response envelope and hands the raw
entries to the normalizer. Extractors never raise: any collaborator
failure degrades that category to zero items.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Callable, List, Type

from pydantic import BaseModel, ValidationError

from models.extraction_models import ExtractionCategory
from models.raw_extraction_models import (
    ActionItemsResponse,
    BrainDumpResponse,
    InvestorUpdateResponse,
    ProductIdeasResponse,
    ProgressLogResponse,
)
from services.llm_client import LLMClient
from services.normalizer import normalize_batch

logger = logging.getLogger(__name__)


class CategoryExtractor:
    """Base extractor. Subclasses set the prompts and the response envelope."""

    category: ExtractionCategory
    system_prompt: str = ""
    temperature: float = 0.3
    # Envelope model whose entries() yields the raw items
    response_model: Type[BaseModel]

    def __init__(
        self,
        llm: LLMClient,
        timeout: float | None = None,
        today: Callable[[], date] = date.today
    ):
        self.llm = llm
        self.timeout = timeout or getattr(llm, "timeout", None)
        self._today = today

    def build_prompt(self, transcript: str) -> str:
        raise NotImplementedError

    async def extract(self, transcript: str) -> list:
        """
        Extract normalized items for this category from a transcript.

        Args:
            transcript: Transcript text, embedded verbatim in the prompt

        Returns:
            Zero or more typed records; empty on any model or parse failure
        """
        category = self.category.value
        today = self._today()
        try:
            content = await asyncio.wait_for(
                self.llm.complete(
                    self.system_prompt,
                    self.build_prompt(transcript),
                    temperature=self.temperature
                ),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Extraction timed out: category={category}, timeout={self.timeout}s")
            return []
        except Exception as e:
            logger.error(f"Extraction call failed: category={category}, error={e}", exc_info=True)
            return []

        raw_items = self.parse_response(content)
        items = normalize_batch(self.category, raw_items, today=today)
        logger.info(
            f"Extraction complete: category={category}, raw={len(raw_items)}, items={len(items)}"
        )
        return items

    def parse_response(self, content: str) -> List[Any]:
        """Validate the model reply against the envelope. Anything unusable means zero entries."""
        try:
            response = self.response_model.model_validate_json(content)
        except ValidationError as e:
            logger.warning(
                f"Model response failed validation: category={self.category.value}, "
                f"errors={e.error_count()}"
            )
            return []
        return response.entries()


class ActionItemsExtractor(CategoryExtractor):
    category = ExtractionCategory.action_items
    temperature = 0.3
    response_model = ActionItemsResponse
    system_prompt = (
        "You are an expert at extracting action items from meeting transcripts. "
        "Return only valid JSON."
    )

    def build_prompt(self, transcript: str) -> str:
        return f"""Analyze this transcript and extract ALL action items, tasks, and todos.

Today's date is {self._today().isoformat()}.

For each action item, identify:
1. The task description (be specific and clear)
2. Who is responsible (look for patterns like "@Name", "Name needs to", "Name should", or "I need to").
   For first-person tasks ("I need to ...") that name another person, use that person; otherwise use null.
3. Any deadline mentioned (dates, "by Friday", "end of week", etc.). Return it as YYYY-MM-DD when it can be resolved from today's date, otherwise return the phrase as spoken or null.
4. Priority level based on language:
   - HIGH: Contains "urgent", "ASAP", "critical", "immediately", "top priority"
   - MEDIUM: Contains "important", "should", "need to"
   - LOW: Contains "maybe", "consider", "when possible", "eventually"
   - If none of these cues appear, use MEDIUM.

Return a JSON object with an "action_items" array. If no action items are found, return an empty array.

Transcript:
{transcript}

Return format:
{{
  "action_items": [
    {{
      "task": "Complete the quarterly report",
      "assignee": "Sarah",
      "deadline": "2026-01-16",
      "priority": "high"
    }}
  ]
}}"""


class InvestorUpdateExtractor(CategoryExtractor):
    category = ExtractionCategory.investor_updates
    temperature = 0.5
    response_model = InvestorUpdateResponse
    system_prompt = (
        "You are an expert at creating investor updates. "
        "Be concise, specific, and professional. Return only valid JSON."
    )

    def build_prompt(self, transcript: str) -> str:
        return f"""Analyze this transcript and extract information suitable for an investor update email.

Extract:
1. WINS: Positive achievements, milestones, successes, good news
2. METRICS: Numbers, KPIs, growth figures, user counts, revenue, etc. (flat key/value pairs only)
3. CHALLENGES: Problems, obstacles, concerns, what's not going well
4. ASKS: What help is needed, introductions requested, advice sought

Then draft a professional investor update email with:
- A compelling subject line
- Well-structured email body with clear sections, several paragraphs
- Professional yet personal tone
- Specific and concrete information taken from the transcript

If the transcript contains nothing relevant to investors, return empty lists, an empty metrics object and empty strings.

Transcript:
{transcript}

Return format:
{{
  "wins": ["Launched new feature X", "Signed deal with Company Y"],
  "metrics": {{"users": 1000, "revenue": "$50k MRR", "growth": "20% WoW"}},
  "challenges": ["Hiring is taking longer than expected"],
  "asks": ["Introduction to VP of Sales at TechCorp"],
  "draft_subject": "November Update: Strong Growth + New Partnership",
  "draft_body": "Hi team,\\n\\nHere's what's new..."
}}"""


class ProgressLogExtractor(CategoryExtractor):
    category = ExtractionCategory.progress_logs
    temperature = 0.3
    response_model = ProgressLogResponse
    system_prompt = (
        "You are an expert at extracting progress updates from conversations. "
        "Return only valid JSON."
    )

    def build_prompt(self, transcript: str) -> str:
        return f"""Analyze this transcript and extract progress updates categorized into three groups:

1. COMPLETED: Tasks finished, shipped features, done items (past tense: "shipped", "finished", "completed", "done")
2. IN PROGRESS: Current work, ongoing tasks (present: "working on", "building", "currently")
3. BLOCKED: Stuck items, waiting on something, obstacles (words: "blocked", "stuck", "waiting for", "can't proceed")

Be specific about what was accomplished, what's being worked on, and what's blocking progress.
Use empty arrays for groups with nothing in them.

Transcript:
{transcript}

Return format:
{{
  "completed": ["Shipped the new dashboard", "Fixed the login bug"],
  "in_progress": ["Building the analytics feature", "Refactoring the API"],
  "blocked": ["Waiting on design mockups for checkout flow"]
}}"""


class ProductIdeasExtractor(CategoryExtractor):
    category = ExtractionCategory.product_ideas
    temperature = 0.4
    response_model = ProductIdeasResponse
    system_prompt = (
        "You are an expert product manager at extracting and categorizing product ideas. "
        "Return only valid JSON."
    )

    def build_prompt(self, transcript: str) -> str:
        return f"""Analyze this transcript and extract ALL product ideas, feature requests, and improvement suggestions.

For each idea, identify:
1. The idea itself (be specific and actionable)
2. Category:
   - feature: Brand new feature or capability
   - improvement: Enhancement to existing feature
   - integration: Third-party integration or API
   - pivot: Major strategic change
   - experiment: Something to test or try
   - new_product: Entirely new product line
3. Priority based on language:
   - HIGH: "Must have", "critical", "urgent", "customers are asking for this"
   - MEDIUM: "Would be nice", "should add", "important"
   - LOW: "Maybe", "someday", "nice to have"
4. Context: Why this idea came up, the problem it solves

If no ideas are found, return an empty "ideas" array.

Transcript:
{transcript}

Return format:
{{
  "ideas": [
    {{
      "idea": "Add dark mode to the dashboard",
      "category": "feature",
      "priority": "medium",
      "context": "Multiple users have requested this for late-night work sessions"
    }}
  ]
}}"""


class BrainDumpExtractor(CategoryExtractor):
    category = ExtractionCategory.brain_dump
    temperature = 0.4
    response_model = BrainDumpResponse
    system_prompt = (
        "You are an expert at organizing unstructured notes and thoughts. "
        "Return only valid JSON."
    )

    def build_prompt(self, transcript: str) -> str:
        return f"""Analyze this transcript and extract all unstructured notes, thoughts, and discussions.

Categorize each item as exactly ONE of:
1. MEETING: Discussion with others (list participant names when people are named in a conversational context)
2. BLOCKER: Something preventing progress, a risk or obstacle
3. DECISION: A choice or agreement that was made
4. QUESTION: Questions that came up, things to research
5. FOLLOWUP: Things to revisit, check on, or reminders

Categories are mutually exclusive. If an item could fit more than one, pick the single most salient one.

Transcript:
{transcript}

Return format:
{{
  "items": [
    {{
      "content": "Discussed Q4 roadmap with Sarah and Mike",
      "category": "meeting",
      "participants": ["Sarah", "Mike"]
    }},
    {{
      "content": "Need to research competitor pricing models",
      "category": "question",
      "participants": []
    }}
  ]
}}"""


EXTRACTOR_CLASSES = (
    ActionItemsExtractor,
    InvestorUpdateExtractor,
    ProgressLogExtractor,
    ProductIdeasExtractor,
    BrainDumpExtractor,
)


def build_extractors(llm: LLMClient, timeout: float | None = None) -> List[CategoryExtractor]:
    """One extractor per category, all sharing the same LLM client."""
    return [extractor_cls(llm, timeout=timeout) for extractor_cls in EXTRACTOR_CLASSES]
