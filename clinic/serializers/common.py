import html

import bleach
from rest_framework import serializers


def clean_text(v) -> str:
    """Strip markup from user supplied text.

    bleach escapes ``&``, ``<`` and ``>`` in what it keeps; the text is
    stored as plain text, so the entities are turned back into characters.
    """
    return html.unescape(bleach.clean((v or '').strip(), tags=[], strip=True))


class CleanCharField(serializers.CharField):
    """CharField whose value is passed through bleach."""

    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))
