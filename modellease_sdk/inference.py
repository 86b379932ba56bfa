"""
InferenceGateway - sends a prompt to an external text-completion service.

A call is: credential check, prompt sanitization, one POST, response shape
validation, whitespace normalization. No retries, no history.
"""
import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError

from .config import DEFAULT_INFERENCE_URL
from .exceptions import (
    EmptyPromptError, InferenceTransportError, InvalidResponseShapeError,
    MissingCredentialError
)
from .models import Completion, InferenceRequest, InferenceResponse
from .utils import normalize_whitespace, sanitize_payload, validate_url


class InferenceGateway:
    """
    Client for a Hugging Face style text-completion endpoint.

    The service is called with ``{"inputs": prompt}`` and a bearer credential,
    and must answer with a list whose first element has a non-empty
    ``generated_text``.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_url: str = DEFAULT_INFERENCE_URL,
        http_session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        reject_empty: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the InferenceGateway

        Args:
            api_key: Bearer credential for the service; checked on every call
            model_url: Endpoint of the text-completion model
            http_session: Optional requests session (one is created otherwise)
            timeout: Request timeout in seconds; None keeps the transport default
            reject_empty: Refuse prompts that are empty after trimming
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If the URL doesn't use https (unless it's localhost/127.0.0.1)
        """
        validate_url("model_url", model_url)
        self.api_key = api_key
        self.model_url = model_url
        self.session = http_session or requests.Session()
        self.timeout = timeout
        self.reject_empty = reject_empty
        self.logger = logger or logging.getLogger(__name__)

    def infer(self, prompt: str) -> str:
        """
        Generate a response for ``prompt``

        Returns:
            The generated text with whitespace collapsed

        Raises:
            MissingCredentialError: If no credential is configured (no request is sent)
            EmptyPromptError: If ``reject_empty`` is set and the prompt is blank
            InferenceTransportError: On network failure or an HTTP error status
            InvalidResponseShapeError: If the response body has an unexpected shape
        """
        return self.complete(prompt).text

    def complete(self, prompt: str) -> InferenceResponse:
        """Like ``infer`` but returns the full ``InferenceResponse``."""
        if not self.api_key:
            self.logger.error("Error: Missing inference API key.")
            raise MissingCredentialError("Inference API key is not configured")

        request = InferenceRequest(inputs=prompt.strip())
        if self.reject_empty and not request.inputs:
            raise EmptyPromptError("Prompt is empty")

        data = self._post(request)
        generated = self._extract_generated_text(data)
        return InferenceResponse(text=normalize_whitespace(generated), raw=generated)

    def _post(self, request: InferenceRequest) -> Any:
        payload = request.model_dump()
        self.logger.debug(f"Sending inference request: {sanitize_payload(payload)}")
        try:
            response = self.session.post(
                self.model_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            self.logger.error(f"Inference request failed with status {status}: {e}")
            raise InferenceTransportError(f"Inference request failed: {e}", status_code=status) from e
        except requests.RequestException as e:
            self.logger.error(f"Inference request failed: {e}")
            raise InferenceTransportError(f"Inference request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error(f"Invalid JSON response from inference service: {e}")
            raise InvalidResponseShapeError(f"Invalid JSON response from inference service: {e}") from e

        self.logger.debug(f"Inference response: {data}")
        return data

    def _extract_generated_text(self, data: Any) -> str:
        if not isinstance(data, list) or not data:
            self.logger.error(f"Invalid response format: {data!r}")
            raise InvalidResponseShapeError("Expected a non-empty list of completions")

        try:
            completion = Completion.model_validate(data[0])
        except ValidationError as e:
            self.logger.error(f"Invalid response format: {data!r}")
            raise InvalidResponseShapeError(f"First completion has no generated_text: {e}") from e
        return completion.generated_text

    def close(self) -> None:
        self.session.close()
