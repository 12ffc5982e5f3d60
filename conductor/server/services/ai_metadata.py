"""AI-generated page metadata

Overview
--------
Produces page summaries and tags with Pydantic AI. Page text is split into
token-bounded chunks (tiktoken), each chunk is summarized or tagged
separately, and a final call condenses the partial results.

The model answers the literal word ``empty`` when it cannot produce a
result; that is surfaced to callers as an empty string or empty list.

Model
-----
``AIMetadataGenerator`` accepts any Pydantic AI model (``TestModel`` and
``FunctionModel`` work for offline use). Without one it builds an OpenAI chat
model from ``settings.openai`` on first use.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, List, Optional, Sequence

import tiktoken
from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from conductor.core.errors import internal_error
from conductor.core.logging_config import get_logger
from conductor.core.monitoring import log_llm_call
from conductor.server.core.config import OpenAIConfig, settings

logger = get_logger(__name__)

EMPTY_RESULT = "empty"
TOKENS_PER_CHUNK = 2000
MAX_SUMMARY_LENGTH = 500
MAX_TAGS = 10
ENCODING_NAME = "o200k_base"

PAGE_SUMMARY_PROMPT = (
    "Generate a summary of this text. Disregard any code blocks, equations, or images. "
    "The summary may not exceed 500 characters. If you are unable to generate a summary, "
    "return only the word 'empty'."
)
SUMMARY_OF_SUMMARIES_PROMPT = (
    "Given the following list of summaries, seperated by semicolons, generate a concise summary "
    "of these summaries. The final summary may not exceed 500 characters. If you are unable to "
    "generate a final summary, return only the word 'empty'. When referring to the content that "
    "is being summarized, refer to it as 'this page'."
)
PAGE_TAGS_PROMPT = (
    "Generate a list of tags, separated by commas, for this text. Disregard any code blocks, "
    "equations, or images. The tags should be only alphanumeric. If you are unable to create any "
    "tags, return only the word 'empty'."
)
TAGS_SELECTION_PROMPT = (
    "Given the following list of tags, select the most 10 most useful tags for content tagging and "
    "organization purposes and return them as a new list, each separated by a comma. If you are "
    "unable to generate a new list of tags, return only the word 'empty'. The final list of tags "
    "should not have more than 10 tags. If there are more than 10 tags, only return the first 10 tags."
)


def truncate_summary(summary: str, limit: int = MAX_SUMMARY_LENGTH) -> str:
    """Cut an over-long summary after the last period within ``limit`` characters."""
    if len(summary) <= limit:
        return summary
    last_period = summary.rfind(".", 0, limit + 1)
    return summary[: last_period + 1]


def parse_tags(raw: str, limit: int = MAX_TAGS) -> List[str]:
    tags = [tag.strip() for tag in raw.split(",")]
    if tags and tags[-1].endswith("."):
        tags[-1] = tags[-1][:-1].strip()
    return list(dict.fromkeys(tag for tag in tags if tag))[:limit]


def _clean_output(output: Any) -> str:
    text = str(output or "").strip()
    return "" if text == EMPTY_RESULT else text


class AIMetadataGenerator:
    """Summaries and tags for library pages.

    Args:
        model: Pydantic AI model or model name; defaults to the configured OpenAI model
        encoding: tiktoken encoding used for chunking; loaded lazily when omitted
        tokens_per_chunk: Chunk size in tokens
        config: OpenAI configuration used when ``model`` is omitted
    """

    def __init__(
        self,
        model: Any = None,
        *,
        encoding: Optional[Any] = None,
        tokens_per_chunk: int = TOKENS_PER_CHUNK,
        config: Optional[OpenAIConfig] = None,
    ) -> None:
        self._model = model
        self._encoding = encoding
        self.tokens_per_chunk = tokens_per_chunk
        self.config = config or settings.openai
        self._agents: dict = {}

    @property
    def model_name(self) -> str:
        if self._model is None or isinstance(self._model, str):
            return self._model or self.config.model
        return getattr(self._model, "model_name", type(self._model).__name__)

    def _get_model(self) -> Any:
        if self._model is None:
            if not self.config.api_key:
                logger.error("OPENAI_API_KEY is not set; AI metadata generation is unavailable")
                raise internal_error("err92")
            self._model = OpenAIChatModel(self.config.model, provider=OpenAIProvider(api_key=self.config.api_key))
            logger.debug(f"Created OpenAI chat model {self.config.model} for AI metadata")
        return self._model

    def _agent(self, system_prompt: str) -> Agent:
        agent = self._agents.get(system_prompt)
        if agent is None:
            agent = Agent(self._get_model(), output_type=str, system_prompt=system_prompt)
            self._agents[system_prompt] = agent
        return agent

    async def _ask(self, system_prompt: str, content: str, purpose: str) -> str:
        start = time.time()
        result = await self._agent(system_prompt).run(content)
        log_llm_call(self.model_name, purpose, (time.time() - start) * 1000)
        return _clean_output(result.output)

    # ------------------------------------------------------------------
    # Chunking
    # ------------------------------------------------------------------

    @property
    def encoding(self) -> Any:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(ENCODING_NAME)
        return self._encoding

    def chunk_text(self, text: str) -> List[str]:
        """Split ``text`` into pieces of at most ``tokens_per_chunk`` tokens."""
        if not text or not text.strip():
            return []
        tokens = self.encoding.encode(text)
        return [
            self.encoding.decode(tokens[i : i + self.tokens_per_chunk])
            for i in range(0, len(tokens), self.tokens_per_chunk)
        ]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_summary(self, chunks: Sequence[str]) -> str:
        """Summary of the chunked page text, or an empty string when none could be made."""
        if not chunks:
            return ""
        partials = await asyncio.gather(*(self._ask(PAGE_SUMMARY_PROMPT, c, "page_summary") for c in chunks))
        partials = [p for p in partials if p]
        if not partials:
            return ""
        final = await self._ask(SUMMARY_OF_SUMMARIES_PROMPT, ";".join(partials), "summary_of_summaries")
        return truncate_summary(final)

    async def generate_tags(self, chunks: Sequence[str]) -> List[str]:
        """Up to ten tags for the chunked page text; empty when none could be made."""
        if not chunks:
            return []
        partials = await asyncio.gather(*(self._ask(PAGE_TAGS_PROMPT, c, "page_tags") for c in chunks))
        partials = [p for p in partials if p]
        if not partials:
            return []
        final = await self._ask(TAGS_SELECTION_PROMPT, ", ".join(partials), "tags_selection")
        return parse_tags(final)
