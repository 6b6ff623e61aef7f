"""
Client for the Google Generative Language API.

Which API version and generation method a given key/model supports is not
known up front (older keys only expose the legacy PaLM-style methods, newer
models only `generateContent`, and the preferred version moves around). So
`generate()` walks an ordered list of (version, method) candidates:

  - 404                -> that shape does not exist here; try the next one
  - other HTTP errors  -> abort the sweep
  - non-JSON body      -> abort the sweep
  - 2xx but no text    -> try the next one

Each attempt is classified into an `AttemptResult` by `classify_response`,
which does no networking and is tested on its own.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import httpx

from config import Settings
from errors import GenerationFailure

logger = logging.getLogger("math-practice.gateway")

FALLBACK_VERSIONS = ("v1beta1", "v1beta", "v1")
METHODS = ("generateContent", "generateMessage", "generateText")

TEMPERATURE = 0.7
CANDIDATE_COUNT = 1


@dataclass(frozen=True)
class Candidate:
    version: str
    method: str

    @property
    def label(self) -> str:
        return f"{self.version} {self.method}"


class Outcome(enum.Enum):
    SUCCESS = "success"
    SOFT_FAIL = "soft_fail"  # keep sweeping
    HARD_FAIL = "hard_fail"  # stop sweeping


@dataclass(frozen=True)
class AttemptResult:
    outcome: Outcome
    text: Optional[str] = None
    error: Optional[GenerationFailure] = None

    @classmethod
    def success(cls, text: str) -> "AttemptResult":
        return cls(Outcome.SUCCESS, text=text)

    @classmethod
    def soft_fail(cls, message: str) -> "AttemptResult":
        return cls(Outcome.SOFT_FAIL, error=GenerationFailure(message))

    @classmethod
    def hard_fail(cls, message: str) -> "AttemptResult":
        return cls(Outcome.HARD_FAIL, error=GenerationFailure(message))


# --- Payload helpers ---------------------------------------------------------------


def candidate_versions(preferred: Optional[str]) -> List[str]:
    """Preferred version first, then the fallbacks; no blanks, no repeats."""
    seen: List[str] = []
    for v in (preferred, *FALLBACK_VERSIONS):
        if v and v not in seen:
            seen.append(v)
    return seen


def build_candidates(preferred_version: Optional[str]) -> List[Candidate]:
    return [Candidate(v, m) for v in candidate_versions(preferred_version) for m in METHODS]


def build_request_body(method: str, prompt: str) -> Dict[str, Any]:
    if method == "generateContent":
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": TEMPERATURE, "candidateCount": CANDIDATE_COUNT},
        }
    if method == "generateMessage":
        return {
            "prompt": {"messages": [{"author": "user", "content": prompt}]},
            "temperature": TEMPERATURE,
            "candidateCount": CANDIDATE_COUNT,
        }
    # generateText (legacy)
    return {
        "prompt": {"text": prompt},
        "temperature": TEMPERATURE,
        "candidateCount": CANDIDATE_COUNT,
    }


def _iter_candidates(payload: Any) -> Iterable[Any]:
    if isinstance(payload, dict) and isinstance(payload.get("candidates"), list):
        return payload["candidates"]
    return []


def extract_candidate_text(payload: Any) -> Optional[str]:
    """
    Pull the first piece of text out of a response, whichever shape it has:
    `output` (generateText), `content` as a string (generateMessage) or
    `content.parts[].text` (generateContent).
    """
    for cand in _iter_candidates(payload):
        if not isinstance(cand, dict):
            continue
        if isinstance(cand.get("output"), str):
            return cand["output"].strip()

        content = cand.get("content")
        if isinstance(content, str):
            return content.strip()

        parts = content.get("parts", content) if isinstance(content, dict) else content
        if isinstance(parts, list):
            for part in parts:
                if isinstance(part, dict) and isinstance(part.get("text"), str):
                    return part["text"].strip()
    return None


def _error_message(payload: Any, raw: str, status_code: int) -> str:
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return raw or f"Model request failed with status {status_code}"


def classify_response(
    candidate: Candidate, status_code: int, raw: str, endpoint: str
) -> AttemptResult:
    payload: Any = None
    if raw:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return AttemptResult.hard_fail(
                f"Failed to parse response for {candidate.version}/{candidate.method}: {raw}"
            )

    if not 200 <= status_code < 300:
        message = f"[{candidate.label}] {_error_message(payload, raw, status_code)} (endpoint: {endpoint})"
        if status_code == 404:
            return AttemptResult.soft_fail(message)
        return AttemptResult.hard_fail(message)

    text = extract_candidate_text(payload)
    if not text:
        suffix = f": {raw}" if raw else ""
        return AttemptResult.soft_fail(
            f"[{candidate.label}] Model response did not include text output{suffix}"
        )
    return AttemptResult.success(text)


# --- Gateway -----------------------------------------------------------------------


class TextGenerationGateway:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://generativelanguage.googleapis.com",
        api_version: str = "v1beta",
        model_name: str = "models/gemini-2.0-flash",
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.model_path = model_name if model_name.startswith("models/") else f"models/{model_name}"
        self.timeout = timeout
        # tests hand in a client with a MockTransport
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextGenerationGateway":
        return cls(
            settings.google_api_key,
            base_url=settings.google_api_base_url,
            api_version=settings.google_api_version,
            model_name=settings.google_model_name,
            timeout=settings.google_api_timeout,
        )

    def candidates(self) -> List[Candidate]:
        return build_candidates(self.api_version)

    def endpoint(self, candidate: Candidate) -> str:
        return f"{self.base_url}/{candidate.version}/{self.model_path}:{candidate.method}"

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise GenerationFailure("GOOGLE_API_KEY not configured on server.")

        if self._client is not None:
            return self._sweep(self._client, prompt)
        with httpx.Client(timeout=self.timeout) as client:
            return self._sweep(client, prompt)

    def _sweep(self, client: httpx.Client, prompt: str) -> str:
        last_error: Optional[GenerationFailure] = None

        for cand in self.candidates():
            result = self._attempt(client, cand, prompt)
            if result.outcome is Outcome.SUCCESS:
                logger.debug("generation succeeded via %s", cand.label)
                return result.text or ""
            if result.outcome is Outcome.HARD_FAIL:
                logger.warning("generation aborted at %s: %s", cand.label, result.error)
                raise result.error or GenerationFailure(cand.label)
            logger.info("generation candidate %s skipped: %s", cand.label, result.error)
            last_error = result.error

        raise last_error or GenerationFailure("Unable to generate text")

    def _attempt(self, client: httpx.Client, cand: Candidate, prompt: str) -> AttemptResult:
        endpoint = self.endpoint(cand)
        logger.debug("trying %s", endpoint)
        try:
            resp = client.post(
                endpoint,
                json=build_request_body(cand.method, prompt),
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as e:
            return AttemptResult.soft_fail(f"[{cand.label}] transport error: {type(e).__name__}: {e}")
        return classify_response(cand, resp.status_code, resp.text, endpoint)
