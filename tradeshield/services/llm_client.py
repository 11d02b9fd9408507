import logging
from typing import Any, Dict, List, Optional, Union

from openai import OpenAI

from tradeshield.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


MessageContent = Union[str, List[Dict[str, Any]]]


class LLMClient:
    """
    Wrapper around the OpenAI client for structured-output analysis calls.

    The OpenAI client is built once and held by this object; pass ``client``
    to substitute a fake in tests. A client is only built when an API key is
    configured, so ``is_configured`` is False otherwise.
    """

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.client = client
        self.model = model or default_settings.openai_model
        self.temperature = temperature if temperature is not None else default_settings.openai_temperature
        self.max_tokens = max_tokens or default_settings.openai_max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        client = None
        if settings.is_openai_configured:
            # Single attempt per analysis; failures are reported, not retried
            client = OpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
                max_retries=0,
            )
        return cls(
            client=client,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def complete_structured(
        self,
        system_prompt: str,
        user_content: MessageContent,
        response_format: Dict[str, Any],
    ) -> Optional[str]:
        """
        Run one chat completion constrained to ``response_format``.

        Returns the raw message content (None if the model returned nothing).
        OpenAIError propagates to the caller.
        """
        if self.client is None:
            raise RuntimeError("LLMClient has no OpenAI client configured")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            response_format=response_format,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        choice = response.choices[0]
        if getattr(choice.message, "refusal", None):
            logger.warning(f"Model refused the request: {choice.message.refusal}")
        return choice.message.content
