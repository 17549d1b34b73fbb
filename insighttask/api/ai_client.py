"""
Completion API client (OpenAI-compatible, xAI Grok by default)
"""

from typing import Optional, Dict, List
from openai import AsyncOpenAI, OpenAIError
from insighttask.config.settings import settings
from insighttask.config.constants import AI_TEMPERATURE
from insighttask.utils.error_handler import ExternalServiceError
from insighttask.utils.logger import logger


class CompletionClient:
    """Client for a chat completion endpoint"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize completion client

        Args:
            api_key: API key (defaults to XAI_API_KEY)
            base_url: API base URL (defaults to AI_BASE_URL)
            model: Model name (defaults to AI_MODEL)
            client: Preconfigured AsyncOpenAI instance
        """
        self.api_key = settings.XAI_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.AI_BASE_URL
        self.model = model or settings.AI_MODEL
        self._client = client
        self.logger = logger

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            # Retrying is left to the caller
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=0,
            )
        return self._client

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = AI_TEMPERATURE,
    ) -> Optional[str]:
        """
        Get a (non-streaming) chat completion

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            model: Model to use (defaults to configured model)
            temperature: Sampling temperature

        Returns:
            Response text, or None if the response carries no text

        Raises:
            ExternalServiceError: If the API call fails
        """
        model = model or self.model

        try:
            self.logger.debug(f"Calling completion API with model {model}")

            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
            )
        except OpenAIError as e:
            self.logger.error(f"Completion API error: {e}")
            raise ExternalServiceError(f"Completion API error: {e}") from e

        if not response.choices:
            return None

        content = response.choices[0].message.content
        if content:
            self.logger.debug(f"Completion API response: {content[:100]}...")
        return content

    async def close(self):
        """Close HTTP client"""
        if self._client is not None:
            await self._client.close()
