"""Ollama LLM client wrapper with error handling."""
import math
import httpx
from typing import Any, Dict, List, Optional
import structlog

from pdfchat import config
from pdfchat.errors import BackendUnreachable, EmbeddingUnavailable, GenerationFailure

logger = structlog.get_logger()


class OllamaClient:
    """Async client for the Ollama embed, generate and tags endpoints."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama API base URL (defaults to config.OLLAMA_BASE_URL)
            timeout: Request timeout in seconds (defaults to config.REQUEST_TIMEOUT)
            transport: Optional httpx transport, used to fake the backend in tests
        """
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.transport = transport

    def _client(self, timeout: float = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.timeout,
            transport=self.transport,
        )

    async def embed(self, text: str, model: str = None) -> List[float]:
        """Generate an embedding vector for a text.

        Args:
            text: Text to embed
            model: Model to use (defaults to config.EMBEDDING_MODEL)

        Returns:
            The first embedding returned by the backend

        Raises:
            EmbeddingUnavailable: If the backend is unreachable, answers with
                an error status or returns a malformed, empty or non-finite payload
        """
        model = model or config.EMBEDDING_MODEL

        payload = {
            "model": model,
            "input": text,
        }

        try:
            async with self._client() as client:
                logger.debug(
                    "ollama_embedding_request",
                    model=model,
                    text_length=len(text),
                )

                response = await client.post(
                    f"{self.base_url}/api/embed",
                    json=payload,
                )
                response.raise_for_status()

                data = response.json()

        except httpx.HTTPError as e:
            logger.error("ollama_embedding_error", model=model, error=str(e))
            raise EmbeddingUnavailable(f"Ollama embed call failed: {e}") from e
        except ValueError as e:
            logger.error("ollama_embedding_invalid_json", model=model, error=str(e))
            raise EmbeddingUnavailable(f"Invalid JSON from Ollama embed: {e}") from e

        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        if not embeddings or not isinstance(embeddings, list):
            logger.error("ollama_embedding_empty", model=model)
            raise EmbeddingUnavailable("No embedding received from Ollama")

        vector = embeddings[0]
        if not isinstance(vector, list) or not vector:
            raise EmbeddingUnavailable("Ollama returned an empty embedding vector")

        try:
            vector = [float(value) for value in vector]
        except (TypeError, ValueError) as e:
            raise EmbeddingUnavailable(f"Non-numeric embedding from Ollama: {e}") from e

        if not all(math.isfinite(value) for value in vector):
            logger.error("ollama_embedding_not_finite", model=model)
            raise EmbeddingUnavailable("Ollama returned NaN or infinite embedding values")

        logger.debug(
            "ollama_embedding_response",
            model=model,
            dimension=len(vector),
        )

        return vector

    async def generate(
        self,
        prompt: str,
        model: str = None,
        temperature: Optional[float] = None,
        top_k: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> str:
        """Send a non-streaming completion request to Ollama.

        Args:
            prompt: Full prompt text
            model: Model to use (defaults to config.CHAT_MODEL)
            temperature: Sampling temperature
            top_k: Limit sampling to the k most likely tokens
            top_p: Nucleus sampling threshold

        Returns:
            The generated response text

        Raises:
            GenerationFailure: On connection errors, error statuses or a
                payload without a response text
        """
        model = model or config.CHAT_MODEL

        payload: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False,
        }

        options = {
            key: value
            for key, value in (
                ("temperature", temperature),
                ("top_k", top_k),
                ("top_p", top_p),
            )
            if value is not None
        }
        if options:
            payload["options"] = options

        try:
            async with self._client() as client:
                logger.info(
                    "ollama_generate_request",
                    model=model,
                    prompt_length=len(prompt),
                    options=options,
                )

                response = await client.post(
                    f"{self.base_url}/api/generate",
                    json=payload,
                )
                response.raise_for_status()

                data = response.json()

        except httpx.HTTPError as e:
            logger.error(
                "ollama_generate_error",
                error=str(e),
                status_code=getattr(getattr(e, "response", None), "status_code", None),
            )
            raise GenerationFailure(f"Ollama generate call failed: {e}") from e
        except ValueError as e:
            logger.error("ollama_generate_invalid_json", error=str(e))
            raise GenerationFailure(f"Invalid JSON from Ollama generate: {e}") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            logger.error("ollama_generate_malformed", model=model)
            raise GenerationFailure("Ollama response has no 'response' text")

        logger.info(
            "ollama_generate_response",
            model=model,
            response_length=len(text),
            done=data.get("done"),
        )

        return text

    async def list_models(self) -> List[str]:
        """List all available Ollama models.

        Returns:
            List of model names

        Raises:
            BackendUnreachable: On API errors or an unreadable model list
        """
        try:
            async with self._client(timeout=config.PROBE_TIMEOUT) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                data = response.json()
                return [str(m["name"]) for m in data.get("models", [])]
        except httpx.HTTPError as e:
            logger.error("ollama_list_models_error", error=str(e))
            raise BackendUnreachable(f"Could not list Ollama models: {e}") from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("ollama_list_models_malformed", error=str(e))
            raise BackendUnreachable(f"Unreadable model list from Ollama: {e}") from e

    async def check_available(self) -> None:
        """Check once that the Ollama service answers.

        Raises:
            BackendUnreachable: On connection failure or a non-200 status
        """
        try:
            async with self._client(timeout=config.PROBE_TIMEOUT) as client:
                response = await client.get(f"{self.base_url}/api/tags")
        except httpx.HTTPError as e:
            logger.error("ollama_unreachable", base_url=self.base_url, error=str(e))
            raise BackendUnreachable(
                f"Ollama not available at {self.base_url}: {e}"
            ) from e

        if response.status_code != 200:
            logger.error(
                "ollama_check_bad_status",
                base_url=self.base_url,
                status_code=response.status_code,
            )
            raise BackendUnreachable(
                f"Ollama responded with status {response.status_code}"
            )

        logger.info("ollama_available", base_url=self.base_url)
