"""AI fallback gateway.

Commands the shell cannot resolve locally are handed, as the entire original
line, to a text-generation service that plays the part of the shell. This
module defines the gateway contract and two implementations:

- GeminiGateway: Calls the Gemini ``generateContent`` REST endpoint via httpx
- OfflineGateway: Used when no API key is configured; returns a notice

Gateways never raise for transport failures. Errors come back as a single
``Error: ...`` line so the terminal always renders something.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from models.config import Settings

logger = logging.getLogger(__name__)

_FENCE_LINE = re.compile(r"^\s*```[\w+-]*\s*$\n?", re.MULTILINE)

PROMPT_TEMPLATE = """
You are the kernel and shell of a desktop operating system simulator modelled on a
security-focused Linux distribution. The user is a security professional.

Current Working Directory: {cwd}
File System Structure (Summary): {summary}

User Command: {line}

INSTRUCTIONS:
1. Act EXACTLY like a Linux terminal.
2. For standard commands, answer from the file system context provided.
3. For security tools (nmap, sqlmap, hydra, ping, traceroute, dig), SIMULATE realistic output.
4. If the command is invalid, return "command not found".
5. DO NOT include markdown code blocks. Return RAW text only.
6. Keep responses concise but realistic. Use [OK] or [+] prefixes for status lines.
"""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence lines from a gateway response.

    The gateway is asked, not guaranteed, to omit fences.

    Example:
        >>> strip_code_fences("```bash\\nls\\n```")
        'ls'
    """
    return _FENCE_LINE.sub("", text).strip("\n")


def build_prompt(line: str, cwd: str, filesystem_summary: str) -> str:
    return PROMPT_TEMPLATE.format(cwd=cwd, summary=filesystem_summary, line=line)


class FallbackGateway(ABC):
    """Contract for answering command lines the shell cannot run."""

    @abstractmethod
    async def respond(self, line: str, cwd: str, filesystem_summary: str) -> str:
        """Produce terminal output for an unresolved command line.

        Args:
            line: The entire original, unmodified command line.
            cwd: The session's working directory.
            filesystem_summary: JSON tree summary without file contents.

        Returns:
            Plain text output, or an ``Error: ...`` line on failure.
        """

    async def close(self) -> None:
        """Release any held resources."""


class OfflineGateway(FallbackGateway):
    """Gateway used when no API key is configured."""

    async def respond(self, line: str, cwd: str, filesystem_summary: str) -> str:
        return (
            "[SIMULATION MODE - NO API KEY]\n"
            f"Command '{line}' executed in {cwd}.\n\n"
            "Set GEMINI_API_KEY in the environment or a .env file to enable AI simulation."
        )


class GeminiGateway(FallbackGateway):
    """Gateway backed by the Gemini REST API.

    Attributes:
        model: Model name used for generation.
        base_url: Base URL of the Gemini REST API.
        timeout: Request timeout in seconds, None for no timeout.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            api_key: Gemini API key.
            model: Model name used for generation.
            base_url: Base URL of the Gemini REST API.
            timeout: Request timeout in seconds, None for no timeout.
            transport: Custom transport (e.g., MockTransport for testing).
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"x-goog-api-key": api_key},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def respond(self, line: str, cwd: str, filesystem_summary: str) -> str:
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": build_prompt(line, cwd, filesystem_summary)}]}
            ]
        }

        try:
            response = await self._client.post(
                f"/models/{self.model}:generateContent", json=payload
            )
            response.raise_for_status()
            text = self._extract_text(response.json())
        except httpx.HTTPStatusError as e:
            logger.warning(f"Gateway returned HTTP {e.response.status_code} for {line!r}")
            return f"Error: execution failed. HTTP {e.response.status_code}"
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Gateway request failed for {line!r}: {e}")
            return f"Error: execution failed. {e}"

        return text

    @staticmethod
    def _extract_text(body: dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate."""
        candidates = body.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts)


def create_gateway(settings: Settings) -> FallbackGateway:
    """Build the gateway matching the configured settings."""
    if settings.gemini_api_key:
        logger.info(f"Using Gemini gateway with model {settings.gemini_model}")
        return GeminiGateway(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gateway_timeout,
        )
    logger.info("No GEMINI_API_KEY configured, using offline gateway")
    return OfflineGateway()
