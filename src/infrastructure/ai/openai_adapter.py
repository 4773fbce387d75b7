"""
OpenAI Adapter - Contact extraction from CV text with GPT-4o JSON mode.

Only consulted when the regex heuristics are unsure about a CV.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from src.application.interfaces import AIPort
from src.config.settings import Settings
from .prompt_builder import PromptBuilder, PromptResult


logger = logging.getLogger(__name__)


@dataclass
class JSONReply:
    """Decoded model reply."""
    data: Optional[dict]
    raw: str
    tokens_used: int = 0


class ContactDetailsSchema(BaseModel):
    """Shape of a contact extraction reply."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class OpenAIAdapter(AIPort):
    """
    Reads candidate contact details out of CV text.

    Replies are requested as JSON objects and validated with pydantic;
    anything off-schema degrades to "nothing found".
    """

    DEFAULT_MODEL = "gpt-4o"
    MAX_TOKENS = 300

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the adapter.

        Args:
            settings: Application settings with API key.
        """
        self.settings = settings
        self.prompt_builder = PromptBuilder()
        self._client: Optional[AsyncOpenAI] = None

    def initialize(self) -> None:
        """Create the API client."""
        if not self.settings.openai_api_key:
            raise ValueError("OpenAI API key not configured")
        self._client = AsyncOpenAI(api_key=self.settings.openai_api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if not self._client:
            raise RuntimeError("OpenAI adapter not initialized. Call initialize() first.")
        return self._client

    async def request_json(self, prompt: PromptResult) -> JSONReply:
        """
        Ask the model for a JSON object.

        Returns:
            JSONReply; `data` is None when the reply is not valid JSON.
        """
        response = await self.client.chat.completions.create(
            model=self.DEFAULT_MODEL,
            messages=[
                {"role": "system", "content": prompt.system_prompt},
                {"role": "user", "content": prompt.user_prompt},
            ],
            max_tokens=self.MAX_TOKENS,
            temperature=0,
            response_format={"type": "json_object"},
        )

        raw = response.choices[0].message.content or ""
        tokens_used = response.usage.total_tokens if response.usage else 0

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("AI reply was not valid JSON")
            data = None

        return JSONReply(data=data if isinstance(data, dict) else None, raw=raw, tokens_used=tokens_used)

    async def extract_contact_details(self, cv_text: str) -> dict[str, Optional[str]]:
        """
        Ask the model for name, email and phone found in a CV.

        Returns:
            Dict with name/email/phone keys; values are None when unknown.
        """
        prompt = self.prompt_builder.build_for_contact_extraction(cv_text)
        reply = await self.request_json(prompt)
        logger.info(f"CV contact extraction used {reply.tokens_used} tokens")

        try:
            details = ContactDetailsSchema.model_validate(reply.data or {})
        except ValidationError:
            logger.warning("AI contact extraction did not match the expected schema")
            details = ContactDetailsSchema()
        return details.model_dump()

    async def health_check(self) -> bool:
        """Check if the API is reachable with the configured key."""
        try:
            await self.client.models.retrieve(self.DEFAULT_MODEL)
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False
        return True
