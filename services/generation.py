"""
LLM generation providers: OpenAI and Anthropic implementations.

Implements the ``GenerationProvider`` protocol from core using the
OpenAI and Anthropic SDKs. Lives in services/ because it performs
network I/O (core/ must remain pure).

Every SDK error, timeout included, is re-raised as ``GenerationFailed``
so callers handle a single exception type.

Usage::

    provider = create_generation_provider(settings)
    response = provider.generate(request)
"""

import logging

import anthropic
import openai

from core.config import AppSettings
from core.errors import GenerationFailed
from core.generation.base import GenerationRequest, GenerationResponse, Message

logger = logging.getLogger(__name__)


class OpenAIGenerationProvider:
    """
    Generation provider backed by OpenAI's chat completion API.

    Satisfies the ``GenerationProvider`` protocol.

    Args:
        api_key: OpenAI API key. Required.
        model: Default model when a request carries no override.
        timeout_seconds: Per-request timeout applied by the SDK client.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        timeout_seconds: float = 15.0,
    ) -> None:
        if not api_key:
            raise ValueError("OPENAI_API_KEY must be set in the environment or passed explicitly")
        # max_retries=0: one logical attempt per call
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._model = model

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Generate a completion via OpenAI chat API.

        Raises:
            GenerationFailed: If the API call fails or returns no choices.
        """
        messages = [{"role": m.role, "content": m.content} for m in request.messages]
        try:
            response = self._client.chat.completions.create(
                model=request.model or self._model,
                messages=messages,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except Exception as exc:
            raise GenerationFailed(f"OpenAI generation failed: {exc}") from exc

        if not response.choices:
            raise GenerationFailed("OpenAI generation returned no choices")

        choice = response.choices[0]
        usage = response.usage
        logger.debug(
            "openai completion from %s (%d output tokens)",
            response.model,
            usage.completion_tokens if usage else 0,
        )

        return GenerationResponse(
            content=choice.message.content or "",
            model=response.model,
            usage_input_tokens=usage.prompt_tokens if usage else 0,
            usage_output_tokens=usage.completion_tokens if usage else 0,
        )


class AnthropicGenerationProvider:
    """
    Generation provider backed by Anthropic's Messages API.

    Satisfies the ``GenerationProvider`` protocol.

    Note: Anthropic's API separates the system prompt from messages.
    System messages are extracted and passed as the ``system`` parameter.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        *,
        timeout_seconds: float = 15.0,
    ) -> None:
        if not api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY must be set in the environment or passed explicitly"
            )
        self._client = anthropic.Anthropic(
            api_key=api_key, timeout=timeout_seconds, max_retries=0
        )
        self._model = model

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Generate a completion via Anthropic Messages API.

        Raises:
            GenerationFailed: If the API call fails.
        """
        system_text, conversation = _split_system_messages(request.messages)
        messages = [{"role": m.role, "content": m.content} for m in conversation]

        try:
            kwargs: dict = {
                "model": request.model or self._model,
                "messages": messages,
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
            }
            if system_text:
                kwargs["system"] = system_text

            response = self._client.messages.create(**kwargs)
        except Exception as exc:
            raise GenerationFailed(f"Anthropic generation failed: {exc}") from exc

        # Anthropic returns content as a list of blocks
        content = ""
        for block in response.content:
            if block.type == "text":
                content += block.text

        return GenerationResponse(
            content=content,
            model=response.model,
            usage_input_tokens=response.usage.input_tokens,
            usage_output_tokens=response.usage.output_tokens,
        )


def _split_system_messages(
    messages: tuple[Message, ...],
) -> tuple[str, tuple[Message, ...]]:
    """Separate system messages from conversation messages.

    Returns:
        Tuple of (system_text, remaining_messages). System messages are
        joined with blank lines.
    """
    system_parts: list[str] = []
    conversation: list[Message] = []

    for msg in messages:
        if msg.role == "system":
            system_parts.append(msg.content)
        else:
            conversation.append(msg)

    return "\n\n".join(system_parts), tuple(conversation)


def create_generation_provider(
    settings: AppSettings,
) -> OpenAIGenerationProvider | AnthropicGenerationProvider:
    """Factory: create the generation provider named by ``settings.llm_provider``.

    The provider's default model is the letter model; the scorer passes
    ``settings.scoring_model`` per request.

    Raises:
        ValueError: If the API key is missing or the provider is unknown.
    """
    if settings.llm_provider == "openai":
        return OpenAIGenerationProvider(
            settings.llm_api_key,
            settings.letter_model,
            timeout_seconds=settings.request_timeout_seconds,
        )

    if settings.llm_provider == "anthropic":
        return AnthropicGenerationProvider(
            settings.llm_api_key,
            settings.letter_model,
            timeout_seconds=settings.request_timeout_seconds,
        )

    raise ValueError(
        f"Unknown LLM_PROVIDER: {settings.llm_provider!r}. "
        "Supported values: 'openai', 'anthropic'."
    )
