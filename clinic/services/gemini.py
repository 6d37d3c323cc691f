"""
Minimal client for the Gemini ``generateContent`` REST endpoint.

Only what the flows need is implemented: one user turn in, the text
of the first candidate out, optionally parsed as JSON.
"""
import json
import logging
import re
from typing import Any

import requests
from django.conf import settings

from clinic.exceptions import InvalidModelOutput, ServiceUnavailable, UpstreamServiceError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[A-Za-z]*")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model likes to wrap its answers in."""
    if not text:
        return ""
    return _FENCE_RE.sub("", text).replace("```", "").strip()


def _endpoint() -> str:
    base = settings.GEMINI_API_BASE.rstrip('/')
    return f"{base}/models/{settings.GEMINI_MODEL}:generateContent"


def generate_text(prompt: str, *, json_mode: bool = False) -> str:
    if not settings.AI_ENABLE or not settings.GEMINI_API_KEY:
        raise ServiceUnavailable('AI features are not enabled on this server.')
    body: dict[str, Any] = {'contents': [{'role': 'user', 'parts': [{'text': prompt}]}]}
    if json_mode:
        body['generationConfig'] = {'responseMimeType': 'application/json'}
    try:
        r = requests.post(
            _endpoint(),
            params={'key': settings.GEMINI_API_KEY},
            json=body,
            timeout=settings.GEMINI_TIMEOUT,
        )
        r.raise_for_status()
        data = r.json()
    except requests.RequestException as e:
        logger.warning("Gemini request failed: %s", e)
        raise UpstreamServiceError()
    except ValueError:
        logger.warning("Gemini returned a non-JSON body")
        raise UpstreamServiceError()

    if 'error' in data:
        logger.warning("Gemini error: %s", data['error'])
        raise UpstreamServiceError()
    try:
        parts = data['candidates'][0]['content']['parts']
    except (KeyError, IndexError, TypeError):
        # blocked prompts come back without content
        logger.warning("Gemini answer without content: %s", data.get('promptFeedback'))
        raise UpstreamServiceError('The AI service returned no answer.')
    return ''.join(p.get('text', '') for p in parts if isinstance(p, dict))


def generate_json(prompt: str) -> Any:
    text = strip_code_fences(generate_text(prompt, json_mode=True))
    try:
        return json.loads(text)
    except ValueError:
        logger.warning("Model output is not JSON: %.200s", text)
        raise InvalidModelOutput()
