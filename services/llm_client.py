"""LLMClient: thin async wrapper around OpenAI chat completions in JSON mode."""
import os
import logging
from openai import AsyncOpenAI

from services.errors import LLMResponseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class LLMClient:
    """Language-model collaborator for the extractors.

    Constructed once per request and passed to each extractor rather than
    held as module state.
    """

    def __init__(self, client: AsyncOpenAI | None = None, model: str | None = None, timeout: float | None = None):
        """Initialize with OpenAI API key, model and per-call timeout from environment."""
        if client is None:
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY environment variable is required")
            client = AsyncOpenAI(api_key=api_key)

        self.client = client
        self.model = model or os.getenv("OPENAI_MODEL", "gpt-4o")
        self.timeout = timeout or float(
            os.getenv("SMARTIFY_LLM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        )
        logger.info(f"LLMClient initialized with model={self.model}, timeout={self.timeout}s")

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.3) -> str:
        """
        Run one chat completion that must answer with a single JSON object.

        Args:
            system_prompt: Role/instructions for the model
            user_prompt: Task prompt with the transcript embedded
            temperature: Sampling temperature

        Returns:
            The raw message content (JSON text, not yet parsed)

        Raises:
            LLMResponseError: If the response carries no content
            openai.OpenAIError: On API, network or timeout failures
        """
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
            timeout=self.timeout
        )

        if not response.choices:
            raise LLMResponseError("Model returned no choices")

        content = response.choices[0].message.content
        if not content:
            raise LLMResponseError("Model returned empty content")
        return content
