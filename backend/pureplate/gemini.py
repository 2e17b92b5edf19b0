"""
Gemini Integration
Handles communication with Google's Gemini generateContent endpoint
"""

import asyncio
import logging
from typing import Optional

import httpx

from config import (
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    GEMINI_TEMPERATURE,
    GEMINI_TIMEOUT,
    GEMINI_MAX_ATTEMPTS
)
from pureplate.errors import EmptyResponse, NetworkFailure, QuotaExceeded
from pureplate.prompt import InstructionPayload

logger = logging.getLogger(__name__)

QUOTA_STATUS = "RESOURCE_EXHAUSTED"


def build_request_body(payload: InstructionPayload, temperature: float = GEMINI_TEMPERATURE) -> dict:
    return {
        "contents": [{"parts": [{"text": payload.user_text}]}],
        "systemInstruction": {"parts": [{"text": payload.system_instruction}]},
        "generationConfig": {
            "responseMimeType": "application/json",
            "temperature": temperature
        }
    }


def _error_details(response: httpx.Response) -> tuple[str, str]:
    """Pull (status, message) out of a Gemini error body, if it has one"""
    try:
        body = response.json()
    except ValueError:
        return "", response.text
    if not isinstance(body, dict):
        return "", response.text
    error = body.get("error") or {}
    if not isinstance(error, dict):
        return "", response.text
    return error.get("status", ""), error.get("message", response.text)


def _retry_after(response: httpx.Response, attempt: int) -> int:
    try:
        return int(response.headers.get("Retry-After", 2 ** attempt))
    except ValueError:
        return 2 ** attempt


async def generate_content(
    api_key: str,
    payload: InstructionPayload,
    *,
    model: str = GEMINI_MODEL,
    base_url: str = GEMINI_BASE_URL,
    temperature: float = GEMINI_TEMPERATURE,
    timeout: int = GEMINI_TIMEOUT,
    max_attempts: int = GEMINI_MAX_ATTEMPTS,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> dict:
    """
    POST one generateContent request and return the decoded JSON envelope.

    With the default ``max_attempts`` of 1 this issues exactly one request.
    Higher values retry transport errors and 429s with exponential backoff,
    still as a single logical call.
    """
    url = f"{base_url}/models/{model}:generateContent"
    body = build_request_body(payload, temperature)

    last_error: Optional[NetworkFailure] = None

    for attempt in range(max(1, max_attempts)):
        is_last = attempt >= max_attempts - 1
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                response = await client.post(
                    url,
                    params={"key": api_key},
                    headers={"Content-Type": "application/json"},
                    json=body
                )

            if response.is_success:
                try:
                    return response.json()
                except ValueError:
                    raise NetworkFailure("Invalid API response: body is not JSON")

            status, message = _error_details(response)

            if response.status_code == 429 or status == QUOTA_STATUS:
                last_error = QuotaExceeded(f"Quota limit reached: {message}")
                if not is_last:
                    delay = _retry_after(response, attempt)
                    logger.info("Gemini rate limited, retrying in %ss", delay)
                    await asyncio.sleep(delay)
                    continue
                raise last_error

            raise NetworkFailure(f"API error ({response.status_code}): {message}")

        except httpx.TimeoutException:
            last_error = NetworkFailure(f"Request timed out after {timeout} seconds")
        except httpx.RequestError as e:
            last_error = NetworkFailure(f"Network error: {e}")

        if not is_last:
            logger.info("Gemini request failed (%s), retrying", last_error)
            await asyncio.sleep(2 ** attempt)

    if last_error:
        raise last_error
    raise NetworkFailure("Failed to get response after multiple attempts")


def extract_text(envelope: dict) -> str:
    """Return candidates[0].content.parts[0].text or raise EmptyResponse"""
    try:
        text = envelope["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None

    if not isinstance(text, str) or not text.strip():
        error = envelope.get("error") if isinstance(envelope, dict) else None
        message = error.get("message") if isinstance(error, dict) else None
        raise EmptyResponse(message or "Quota Reached")

    return text
