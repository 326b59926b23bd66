from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

_LOG = logging.getLogger(__name__)

DEFAULT_PROMPT = (
    "You are a security AI. Briefly describe what is happening in this security camera "
    "frame in one short sentence. Focus on movement or people."
)

# Returned when the service answers but says nothing.
EMPTY_DESCRIPTION = "Activity detected."


@dataclass
class DescriptionConfig:
    """Configuration for the image-description client.

    Parameters
    ----------
    api_key:
        Key for the ``generateContent`` API. When ``None``, the
        ``GEMINI_API_KEY`` then ``API_KEY`` environment variables are used.
    base_url:
        API root, without the ``/models/...`` suffix.
    model:
        Model name placed into the request path.
    prompt:
        Instruction sent alongside the image.
    timeout_s:
        Per-request timeout handed to ``requests``.
    """

    api_key: Optional[str] = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.5-flash"
    prompt: str = DEFAULT_PROMPT
    timeout_s: float = 15.0


class DescriptionError(Exception):
    """Base class for description-service errors."""


class DescriptionConfigError(DescriptionError):
    """The client is not configured well enough to make a request."""


class DescriptionHttpError(DescriptionError):
    """HTTP or response-parsing failure while talking to the service."""


def strip_data_url(snapshot: str) -> str:
    """Return the base64 payload of a ``data:...;base64,`` URL (or the input as-is)."""
    head, sep, tail = snapshot.partition(",")
    if sep and head.startswith("data:"):
        return tail
    return snapshot


class DescriptionClient:
    """Client for a Gemini-style ``POST /models/{model}:generateContent`` endpoint.

    One call per qualifying trigger; the caller runs it off the sampling
    thread and owns the fallback text on failure.
    """

    def __init__(
        self,
        cfg: Optional[DescriptionConfig] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._cfg = cfg or DescriptionConfig()
        self._session = session or requests.Session()
        self._log = logger or _LOG

    # --------------------------------------------------------------------- utils

    @property
    def config(self) -> DescriptionConfig:
        return self._cfg

    def _api_key(self) -> str:
        key = self._cfg.api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
        if not key:
            raise DescriptionConfigError(
                "no API key configured; set GEMINI_API_KEY or pass DescriptionConfig(api_key=...)"
            )
        return key

    # ----------------------------------------------------------------- main API

    def describe(self, snapshot: str) -> str:
        """Describe a JPEG snapshot in one short sentence.

        Parameters
        ----------
        snapshot:
            Base64 JPEG, optionally as a ``data:image/jpeg;base64,`` URL.

        Raises
        ------
        DescriptionConfigError
            If no API key is available or the snapshot is empty.
        DescriptionHttpError
            If the request fails, returns non-2xx, or the body is not JSON.
        """
        payload_b64 = strip_data_url(snapshot or "")
        if not payload_b64:
            raise DescriptionConfigError("empty snapshot")

        body: dict[str, Any] = {
            "contents": [
                {
                    "parts": [
                        {"inline_data": {"mime_type": "image/jpeg", "data": payload_b64}},
                        {"text": self._cfg.prompt},
                    ]
                }
            ]
        }
        base_url = self._cfg.base_url.rstrip("/")
        url = f"{base_url}/models/{self._cfg.model}:generateContent"

        self._log.debug(
            "posting generateContent model=%s bytes=%d", self._cfg.model, len(payload_b64)
        )
        data = self._post_json(url, body)

        text = self._extract_text(data).strip()
        return text or EMPTY_DESCRIPTION

    # ------------------------------------------------------------ internal bits

    def _post_json(self, url: str, body: Mapping[str, Any]) -> Mapping[str, Any]:
        headers = {"x-goog-api-key": self._api_key()}
        try:
            resp = self._session.post(url, json=body, headers=headers, timeout=self._cfg.timeout_s)
        except Exception as exc:
            raise DescriptionHttpError(f"POST {url!r} failed: {exc}") from exc

        if not (200 <= resp.status_code < 300):
            raise DescriptionHttpError(
                f"POST {url!r} returned HTTP {resp.status_code}: {resp.text!r}"
            )

        try:
            data = resp.json()
        except Exception as exc:
            raise DescriptionHttpError(f"POST {url!r} returned invalid JSON: {exc}") from exc
        if not isinstance(data, Mapping):
            raise DescriptionHttpError(f"POST {url!r} returned non-object JSON: {data!r}")
        return data

    def _extract_text(self, payload: Mapping[str, Any]) -> str:
        """Concatenate the text parts of the first candidate, if any."""
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        content = candidates[0].get("content") if isinstance(candidates[0], Mapping) else None
        parts = content.get("parts") if isinstance(content, Mapping) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            str(p["text"])
            for p in parts
            if isinstance(p, Mapping) and isinstance(p.get("text"), str)
        )


def description_config_from_cfg(cfg_module: Any) -> DescriptionConfig:
    """Build :class:`DescriptionConfig` from an application config module.

    All attributes are optional:

    - DESCRIPTION_API_KEY
    - DESCRIPTION_BASE_URL
    - DESCRIPTION_MODEL
    - DESCRIPTION_PROMPT
    - DESCRIPTION_TIMEOUT_S
    """
    defaults = DescriptionConfig()
    return DescriptionConfig(
        api_key=getattr(cfg_module, "DESCRIPTION_API_KEY", None),
        base_url=str(getattr(cfg_module, "DESCRIPTION_BASE_URL", defaults.base_url)),
        model=str(getattr(cfg_module, "DESCRIPTION_MODEL", defaults.model)),
        prompt=str(getattr(cfg_module, "DESCRIPTION_PROMPT", defaults.prompt)),
        timeout_s=float(getattr(cfg_module, "DESCRIPTION_TIMEOUT_S", defaults.timeout_s)),
    )
