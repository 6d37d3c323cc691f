"""
AI flows.

Every flow takes data already validated by its input serializer, builds
a prompt, asks the model for JSON and validates the answer against the
flow's output serializer before anything reaches the client.
"""
import hashlib
import logging

from django.conf import settings
from django.core.cache import cache

from clinic.exceptions import InvalidModelOutput
from clinic.serializers.ai import (
    ChatOutputSerializer,
    InternetSearchOutputSerializer,
    InvoiceOutputSerializer,
    PATIENT_ACTIONS,
    SimulationOutputSerializer,
    SuggestedDoctorSerializer,
    TranslateOutputSerializer,
)
from clinic.services import gemini, prompts

logger = logging.getLogger(__name__)


def _validated(serializer_cls, data, *, many=False):
    s = serializer_cls(data=data, many=many)
    if not s.is_valid():
        logger.warning("%s rejected model output: %s", serializer_cls.__name__, s.errors)
        raise InvalidModelOutput()
    return s.validated_data


def _cache_key(prefix: str, *parts: str) -> str:
    raw = '|'.join(p.strip().lower() for p in parts)
    return f"ai:{prefix}:{hashlib.sha1(raw.encode('utf-8')).hexdigest()}"


def chat(question: str) -> dict:
    out = _validated(ChatOutputSerializer, gemini.generate_json(prompts.chat_prompt(question)))
    return {'answer': out['answer']}


def translate(doctors: list[dict], target_language: str) -> dict:
    out = _validated(
        TranslateOutputSerializer,
        gemini.generate_json(prompts.translate_prompt(doctors, target_language)),
    )
    translated = [dict(d) for d in out['doctors']]
    if len(translated) != len(doctors):
        logger.warning("Translation returned %d doctors for %d", len(translated), len(doctors))
        raise InvalidModelOutput()
    # a field the caller did not send must not appear in the answer
    return {'doctors': [{k: v for k, v in t.items() if k in src} for t, src in zip(translated, doctors)]}


def internet_search(query: str) -> dict:
    key = _cache_key('search', query)
    cached = cache.get(key)
    if cached is not None:
        return cached
    out = _validated(InternetSearchOutputSerializer, gemini.generate_json(prompts.internet_search_prompt(query)))
    payload = {'doctors': [dict(d) for d in out['doctors']]}
    cache.set(key, payload, settings.AI_CACHE_SECONDS)
    return payload


def suggest_doctors(location: str, specialty: str, language: str) -> list[dict]:
    key = _cache_key('suggest', location, specialty, language)
    cached = cache.get(key)
    if cached is not None:
        return cached
    raw = gemini.generate_json(prompts.suggest_doctors_prompt(location, specialty, language))
    if isinstance(raw, dict) and isinstance(raw.get('doctors'), list):
        raw = raw['doctors']
    if not isinstance(raw, list):
        logger.warning("Suggestions are not a list: %.200s", raw)
        raise InvalidModelOutput()
    payload = [dict(d) for d in _validated(SuggestedDoctorSerializer, raw, many=True)]
    cache.set(key, payload, settings.AI_CACHE_SECONDS)
    return payload


def invoice_totals(records: list[dict]) -> dict:
    charges = sum(r['amount'] for r in records if r['amount'] > 0)
    payments = sum(-r['amount'] for r in records if r['amount'] < 0)
    return {
        'charges': round(charges, 2),
        'payments': round(payments, 2),
        'balance': round(charges - payments, 2),
    }


def invoice(data: dict) -> dict:
    totals = invoice_totals(data['records'])
    out = _validated(InvoiceOutputSerializer, gemini.generate_json(prompts.invoice_prompt(data, totals)))
    html = gemini.strip_code_fences(out['html'])
    if not html:
        raise InvalidModelOutput()
    return {'html': html, 'totals': totals}


def sanitize_actions(actions: list[dict], patient_ids: set[str], limit: int) -> list[dict]:
    """Drop actions on unknown patients, cap the count, never return nothing."""
    kept = []
    for a in actions:
        if a['action'] in PATIENT_ACTIONS and a.get('patientId') not in patient_ids:
            logger.info("Dropping %s for unknown patient %r", a['action'], a.get('patientId'))
            continue
        kept.append({k: v for k, v in a.items() if v not in (None, '')})
    kept = kept[:limit]
    return kept or [{'action': 'NO_ACTION'}]


def simulation_cycle(state: dict) -> dict:
    limit = settings.SIMULATION_MAX_ACTIONS
    out = _validated(SimulationOutputSerializer, gemini.generate_json(prompts.simulation_prompt(state, limit)))
    patient_ids = {p['id'] for p in state['patients']}
    return {'actions': sanitize_actions([dict(a) for a in out['actions']], patient_ids, limit)}
