"""Prompt templates for the AI flows.

Inputs are substituted as JSON so user text cannot break the template.
"""
import json


def _dump(value) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def chat_prompt(question: str) -> str:
    return (
        "You support medical representatives and clinicians of a hospital.\n"
        "Answer the question below accurately and concisely. If the question needs a "
        "physician's judgement, say so.\n\n"
        f"Question: {question}\n\n"
        'Reply with JSON of the form {"answer": "<your answer>"}.'
    )


def translate_prompt(doctors: list, target_language: str) -> str:
    return (
        f"Translate the text values of every object in this list into {target_language}.\n"
        "Doctor names are transliterated rather than translated. Keep the same number of "
        "objects in the same order, keep the keys unchanged and do not add keys that are "
        "missing from an object.\n\n"
        f"{_dump(doctors)}\n\n"
        'Reply with JSON of the form {"doctors": [...]}.'
    )


def internet_search_prompt(query: str) -> str:
    return (
        "Using publicly available directory information, list doctors or clinics that match "
        f"this search: {query}\n"
        "For each one give the full name, the medical specialty, a contact phone number and "
        "the full address. Use an empty string for anything you cannot find. Return an empty "
        "list when nothing matches.\n\n"
        'Reply with JSON of the form {"doctors": [{"name": "", "specialty": "", '
        '"phoneNumber": "", "address": ""}]}.'
    )


def suggest_doctors_prompt(location: str, specialty: str, language: str) -> str:
    return (
        f"Suggest up to five {specialty} doctors practising in or near {location} who "
        f"see patients in {language}.\n"
        'Reply with a JSON array of objects of the form {"name": "", "address": "", '
        '"phone": "", "specialty": ""}.'
    )


def invoice_prompt(data: dict, totals: dict) -> str:
    direction = 'rtl' if data['lang'] == 'ar' else 'ltr'
    return (
        "Produce a printable patient invoice as one self-contained HTML document with inline "
        f"CSS only. Set dir=\"{direction}\" on the html element and write all visible text "
        "using the labels given below.\n"
        f"Hospital: {data['hospitalName']} (logo: {data['hospitalLogoUrl']})\n"
        f"Patient: {data['patientName']} (id {data['patientId']})\n"
        "Show every record as a table row with its date, description and amount, then a "
        "summary with the totals exactly as given. Amounts are in the currency named by "
        "the 'iqd' label.\n\n"
        f"Labels:\n{_dump(data['labels'])}\n\n"
        f"Records:\n{_dump(data['records'])}\n\n"
        f"Totals:\n{_dump(totals)}\n\n"
        'Reply with JSON of the form {"html": "<!DOCTYPE html>..."}.'
    )


def simulation_prompt(state: dict, max_actions: int) -> str:
    return (
        "You drive a hospital simulation. Given the current state, choose the next "
        f"1 to {max_actions} actions that keep the hospital running realistically.\n"
        "Admit new emergency patients while the emergency department has room, move "
        "critical emergency patients to the ICU and stable ones to the wards when beds "
        "are free, discharge recovered patients (details: recovered or deceased), and "
        "create or advance service requests. Only refer to patient ids that appear in "
        "the state. Use NO_ACTION when nothing should change.\n\n"
        f"State:\n{_dump(state)}\n\n"
        'Reply with JSON of the form {"actions": [{"action": "", "patientId": "", "details": ""}]}.'
    )
