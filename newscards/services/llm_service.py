import structlog
from typing import Optional, List
from enum import Enum

import openai
import anthropic
import google.generativeai as genai

from ..exceptions import LLMServiceError

logger = structlog.get_logger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class LLMService:
    def __init__(
        self,
        google_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        google_model_name: str = "gemini-2.0-flash-lite",
        openai_model_name: str = "gpt-4o-mini",
        anthropic_model_name: str = "claude-3-haiku-20240307"
    ):
        self.google_api_key = google_api_key
        self.openai_api_key = openai_api_key
        self.anthropic_api_key = anthropic_api_key
        self.google_model_name = google_model_name
        self.openai_model_name = openai_model_name
        self.anthropic_model_name = anthropic_model_name

        # Initialize clients
        self.google_client = None
        self.openai_client = None
        self.anthropic_client = None

        if google_api_key:
            try:
                genai.configure(api_key=google_api_key)
                self.google_client = genai.GenerativeModel(self.google_model_name)
                logger.info("Google Gemini client initialized", model=self.google_model_name)
            except Exception as e:
                logger.warning("Failed to initialize Google Gemini client", error=str(e))

        if openai_api_key:
            try:
                self.openai_client = openai.AsyncOpenAI(api_key=openai_api_key)
                logger.info("OpenAI client initialized")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client", error=str(e))

        if anthropic_api_key:
            try:
                self.anthropic_client = anthropic.AsyncAnthropic(api_key=anthropic_api_key)
                logger.info("Anthropic client initialized")
            except Exception as e:
                logger.warning("Failed to initialize Anthropic client", error=str(e))

    async def generate_with_fallback(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.4,
        max_tokens: int = 2048,
        preferred_provider: Optional[LLMProvider] = None,
        json_output: bool = False
    ) -> str:
        """
        Generate a response, moving on to the next configured provider when one fails.

        Fallback order (unless preferred_provider specified):
        1. Google Gemini
        2. OpenAI
        3. Anthropic Claude

        Providers without an API key are skipped, so with only a Gemini key
        this is a single call.
        """
        providers_to_try = [LLMProvider.GOOGLE, LLMProvider.OPENAI, LLMProvider.ANTHROPIC]
        if preferred_provider:
            providers_to_try = [preferred_provider] + [p for p in providers_to_try if p != preferred_provider]

        errors = []
        for provider in providers_to_try:
            if not self._is_provider_available(provider):
                continue
            try:
                logger.info("llm_generation_attempt", provider=provider.value)
                return await self._generate_with_provider(
                    provider, system_prompt, user_prompt, temperature, max_tokens, json_output
                )
            except LLMServiceError as e:
                logger.warning("llm_provider_failed", provider=provider.value, error=str(e))
                errors.append(str(e))

        if not errors:
            raise LLMServiceError("No LLM provider is configured")
        raise LLMServiceError(f"All LLM providers failed: {'; '.join(errors)}")

    async def _generate_with_provider(
        self,
        provider: LLMProvider,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_output: bool
    ) -> str:
        """Generate response with specific provider."""

        if provider == LLMProvider.GOOGLE:
            return await self._generate_google(system_prompt, user_prompt, temperature, max_tokens, json_output)
        elif provider == LLMProvider.OPENAI:
            return await self._generate_openai(system_prompt, user_prompt, temperature, max_tokens, json_output)
        elif provider == LLMProvider.ANTHROPIC:
            return await self._generate_anthropic(system_prompt, user_prompt, temperature, max_tokens)
        else:
            raise LLMServiceError(f"Unknown provider: {provider}")

    async def _generate_google(
        self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int, json_output: bool
    ) -> str:
        """Generate using Google Gemini."""
        if not self.google_client:
            raise LLMServiceError("Google client not available")

        try:
            generation_config = genai.types.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json" if json_output else None
            )

            full_prompt = f"{system_prompt}\n\n{user_prompt}" if system_prompt else user_prompt

            response = await self.google_client.generate_content_async(
                full_prompt,
                generation_config=generation_config
            )
            result = response.text
            logger.info("Google generation completed", response_length=len(result))
            return result

        except Exception as e:
            raise LLMServiceError(f"Google generation failed: {str(e)}")

    async def _generate_openai(
        self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int, json_output: bool
    ) -> str:
        """Generate using OpenAI GPT."""
        if not self.openai_client:
            raise LLMServiceError("OpenAI client not available")

        try:
            kwargs = {}
            if json_output:
                kwargs["response_format"] = {"type": "json_object"}

            response = await self.openai_client.chat.completions.create(
                model=self.openai_model_name,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ],
                **kwargs
            )
            result = response.choices[0].message.content or ""
            logger.info("OpenAI generation completed", model=self.openai_model_name, response_length=len(result))
            return result

        except openai.AuthenticationError as e:
            raise LLMServiceError(f"OpenAI authentication failed: {str(e)}")
        except openai.RateLimitError as e:
            raise LLMServiceError(f"OpenAI rate limit exceeded: {str(e)}")
        except Exception as e:
            raise LLMServiceError(f"OpenAI generation failed: {str(e)}")

    async def _generate_anthropic(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        """Generate using Anthropic Claude."""
        if not self.anthropic_client:
            raise LLMServiceError("Anthropic client not available")

        try:
            response = await self.anthropic_client.messages.create(
                model=self.anthropic_model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": user_prompt}
                ]
            )
            result = response.content[0].text
            logger.info("Anthropic generation completed", model=self.anthropic_model_name, response_length=len(result))
            return result

        except Exception as e:
            raise LLMServiceError(f"Anthropic generation failed: {str(e)}")

    def _is_provider_available(self, provider: LLMProvider) -> bool:
        """Check if provider is available (has client initialized)."""
        if provider == LLMProvider.GOOGLE:
            return self.google_client is not None
        elif provider == LLMProvider.OPENAI:
            return self.openai_client is not None
        elif provider == LLMProvider.ANTHROPIC:
            return self.anthropic_client is not None
        return False

    def get_available_providers(self) -> List[LLMProvider]:
        """Get list of available LLM providers."""
        return [
            provider
            for provider in (LLMProvider.GOOGLE, LLMProvider.OPENAI, LLMProvider.ANTHROPIC)
            if self._is_provider_available(provider)
        ]
