"""Service for the AI assistant backed by a local Ollama server."""

import json
import os
from typing import Any, Dict, List, Optional
import httpx
from loguru import logger
from pydantic_settings import BaseSettings
from cvmaker.exceptions import AssistantFailure
from cvmaker.models.request_models import AssistantRequest, AssistantTask
from cvmaker.models.response_models import AssistantHealth, AssistantResult

LANGUAGE_NAMES = {"lv": "Latvian", "ru": "Russian", "en": "English"}

SYSTEM_PROMPTS = {
    "lv": "Tu esi profesionāls CV padomdevējs, kas palīdz izveidot kvalitatīvus CV latviešu valodā. Atbildi tikai latviešu valodā.",
    "ru": "Ты профессиональный консультант по составлению резюме, который помогает создавать качественные резюме на русском языке. Отвечай только на русском языке.",
    "en": "You are a professional CV consultant who helps create quality CVs in English. Respond only in English.",
}


class OllamaSettings(BaseSettings):
    """Ollama configuration settings."""

    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama2:3b")
    ollama_fallback_models: str = os.getenv(
        "OLLAMA_FALLBACK_MODELS", "llama2:3b,mistral:7b-instruct-q4_0,phi3:mini"
    )
    ollama_timeout: int = int(os.getenv("OLLAMA_TIMEOUT", "60"))
    ollama_max_tokens: int = int(os.getenv("OLLAMA_MAX_TOKENS", "512"))
    ollama_temperature: float = float(os.getenv("OLLAMA_TEMPERATURE", "0.7"))
    ollama_top_p: float = float(os.getenv("OLLAMA_TOP_P", "0.9"))
    ollama_api_key: Optional[str] = os.getenv("OLLAMA_API_KEY", None)

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def fallback_models(self) -> List[str]:
        return [model.strip() for model in self.ollama_fallback_models.split(",") if model.strip()]


def build_prompt(request: AssistantRequest) -> str:
    """
    Build the user prompt for an assistant request.

    Args:
        request: Assistant request

    Returns:
        str: Prompt text
    """
    language = LANGUAGE_NAMES.get(request.language.value, "English")
    cv_json = json.dumps(request.cv, ensure_ascii=False, indent=2) if request.cv else ""
    extra = request.prompt.strip()

    if request.task == AssistantTask.GENERATE_CV:
        return (
            f"Create a professional CV in {language}.\n\n"
            f"Details: {extra or 'Entry level candidate'}\n\n"
            "Include a professional summary, work experience, education, skills and languages. "
            f"Make it suitable for the {language} job market."
        )
    if request.task == AssistantTask.IMPROVE_CV:
        return (
            f"Suggest content improvements for this CV in {language}:\n\n"
            f"CV Data: {cv_json}\n\n"
            "Focus on impactful descriptions, quantifiable achievements and professional language."
            + (f"\n\nSpecific feedback requested: {extra}" if extra else "")
        )
    if request.task == AssistantTask.ANALYZE_CV:
        return (
            f"Analyze this CV and provide recommendations in {language}:\n\n"
            f"CV Data: {cv_json}\n\n"
            "Cover structure, section ordering, ATS readiness and market expectations."
            + (f"\n\nSpecific feedback requested: {extra}" if extra else "")
        )
    if request.task == AssistantTask.SUMMARY:
        return (
            f"Write a professional summary of at most 500 characters in {language} for this CV:\n\n"
            f"CV Data: {cv_json}"
            + (f"\n\nTarget role: {extra}" if extra else "")
        )
    return extra if not cv_json else f"{extra}\n\nCV Data: {cv_json}"


class AssistantService:
    """Service for interacting with the Ollama text-generation API."""

    def __init__(
        self,
        settings: Optional[OllamaSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the assistant service.

        Args:
            settings: Ollama settings (uses defaults if None)
            transport: Optional httpx transport, e.g. a mock in tests
        """
        self.settings = settings or OllamaSettings()
        self.base_url = self.settings.ollama_base_url.rstrip("/")
        self.model = self.settings.ollama_model
        self.timeout = self.settings.ollama_timeout
        self.api_key = self.settings.ollama_api_key
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return httpx.AsyncClient(timeout=self.timeout, headers=headers, transport=self.transport)

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate text using Ollama.

        Args:
            prompt: User prompt
            system: System prompt (optional)
            temperature: Temperature for generation. Defaults to OLLAMA_TEMPERATURE
            max_tokens: Maximum tokens to generate. Defaults to OLLAMA_MAX_TOKENS

        Returns:
            str: Generated text

        Raises:
            TimeoutError: If the request times out
            AssistantFailure: If the request fails
            ValueError: If the response has an unexpected shape
        """
        url = f"{self.base_url}/api/generate"

        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.settings.ollama_temperature if temperature is None else temperature,
                "top_p": self.settings.ollama_top_p,
                "num_predict": max_tokens or self.settings.ollama_max_tokens,
            },
        }

        if system:
            payload["system"] = system

        async with self._client() as client:
            try:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                result = response.json()
            except httpx.TimeoutException as e:
                raise TimeoutError(f"Ollama request timed out after {self.timeout}s") from e
            except httpx.HTTPError as e:
                raise AssistantFailure(f"Failed to communicate with Ollama: {str(e)}") from e

        if not isinstance(result, dict) or "response" not in result:
            raise ValueError(f"Unexpected response format: {result}")
        return result["response"]

    async def generate(self, request: AssistantRequest) -> AssistantResult:
        """
        Answer an assistant request.

        Never raises: every failure is reported in the result.

        Args:
            request: Assistant request

        Returns:
            AssistantResult: Generated content, or the error message
        """
        system = SYSTEM_PROMPTS.get(request.language.value, SYSTEM_PROMPTS["en"])
        prompt = build_prompt(request)
        if not prompt.strip():
            return AssistantResult(success=False, error="Prompt is empty")

        try:
            content = await self.complete(prompt, system=system)
        except (TimeoutError, AssistantFailure, ValueError) as e:
            logger.error(f"Assistant request failed: {e}")
            return AssistantResult(success=False, error=str(e))

        return AssistantResult(success=True, content=content)

    async def check_model_availability(self) -> bool:
        """
        Check that the configured model (or a fallback) is installed.

        Switches to the first installed fallback model when the configured one
        is missing.
        """
        async with self._client() as client:
            try:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Model availability check failed: {e}")
                return False

        available = [model.get("name") for model in data.get("models") or [] if isinstance(model, dict)]
        if self.model in available:
            return True

        for fallback in self.settings.fallback_models:
            if fallback in available:
                logger.info(f"Model {self.model} not installed, using {fallback}")
                self.model = fallback
                return True
        return False

    async def health(self) -> AssistantHealth:
        """
        Check the Ollama server.

        Returns:
            AssistantHealth: healthy when the server answers and a model is available
        """
        async with self._client() as client:
            try:
                response = await client.get(f"{self.base_url}/api/version")
            except httpx.HTTPError as e:
                logger.error(f"Cannot connect to Ollama at {self.base_url}: {e}")
                return AssistantHealth(status="unhealthy", details="Cannot connect to Ollama service")

        if response.status_code != 200:
            return AssistantHealth(status="unhealthy", details="Ollama service not responding")

        if not await self.check_model_availability():
            return AssistantHealth(status="unhealthy", details="Required AI model not available")

        return AssistantHealth(status="healthy", details="AI service ready", model=self.model)


# Singleton instance
_assistant_service: Optional[AssistantService] = None


def get_assistant_service() -> AssistantService:
    """
    Get or create the assistant service singleton.

    Returns:
        AssistantService: The service instance
    """
    global _assistant_service
    if _assistant_service is None:
        _assistant_service = AssistantService()
    return _assistant_service
