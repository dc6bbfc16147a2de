"""Decide which text is shown for each flower field.

Three layers can supply a field: the original record, a translation into the
active language, and AI summarize/expand content. Precedence per field:

    expanded (description/careInstructions only) > translated > original

Translation only counts when the active language is not the base language.
Summarized content never replaces a field; its key points, quick care and
best-for lines are extra sections next to the resolved fields.
"""

from flowerbase.constants import resolve_language, is_base_language, BASE_LANGUAGE

CORE_FIELDS = (
    'name',
    'type',
    'color',
    'category',
    'parental',
    'bloomingSeason',
    'careInstructions',
    'description',
)

EXPANDABLE_FIELDS = ('description', 'careInstructions')

NARRATION_FIELDS = (
    ('name', 'Name'),
    ('type', 'Type'),
    ('color', 'Color'),
    ('description', 'Description'),
    ('bloomingSeason', 'Blooming Season'),
    ('careInstructions', 'Care Instructions'),
)

CONTENT_SUMMARIZED = 'summarized'
CONTENT_EXPANDED = 'expanded'


def _present(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def resolve_field(field, original, translated=None, ai_content=None, language=None):
    """Resolve one field's display value."""
    if ai_content and ai_content.get('type') == CONTENT_EXPANDED and field in EXPANDABLE_FIELDS:
        expanded = ai_content.get(field)
        if _present(expanded):
            return expanded

    if translated and not is_base_language(language):
        value = translated.get(field)
        if _present(value):
            return value

    return original.get(field) or ''


def resolve_fields(flower: dict, translated=None, ai_content=None, language=None) -> dict:
    """Resolve every core field of a flower."""
    return {
        field: resolve_field(field, flower, translated, ai_content, language)
        for field in CORE_FIELDS
    }


def resolve_view_content(flower: dict, translated=None, ai_content=None, language=None) -> dict:
    """Build the full view model for the detail screen.

    Returns:
        {
            'fields': resolved core fields,
            'language': active translation code,
            'translated': whether any field comes from the translation,
            'contentType': 'summarized' | 'expanded' | None,
            'keyPoints': [...], 'quickCare': str | None, 'bestFor': str | None,
        }
    """
    lang = resolve_language(language) or BASE_LANGUAGE
    fields = resolve_fields(flower, translated, ai_content, lang.translation_code)

    content_type = ai_content.get('type') if ai_content else None
    uses_translation = bool(translated) and not is_base_language(lang.translation_code) and any(
        _present(translated.get(f)) for f in CORE_FIELDS
    )

    return {
        'fields': fields,
        'language': lang.translation_code,
        'translated': uses_translation,
        'contentType': content_type,
        'keyPoints': list(ai_content.get('keyPoints') or []) if ai_content else [],
        'quickCare': ai_content.get('quickCare') if ai_content else None,
        'bestFor': ai_content.get('bestFor') if ai_content else None,
    }


def _sentence(label: str, value: str) -> str:
    value = value.strip()
    if value[-1] in '.!?।':
        return f"{label}: {value}"
    return f"{label}: {value}."


def narration_text(fields: dict) -> str:
    """Text handed to the speech synthesizer, one sentence per field.

    Empty fields are skipped.
    """
    sentences = ['Flower details.']
    for field, label in NARRATION_FIELDS:
        value = fields.get(field)
        if _present(value):
            sentences.append(_sentence(label, value))
    return ' '.join(sentences)


def share_text(fields: dict, url: str) -> str:
    """Short text for the share sheet: name, type and color, then the link."""
    details = ', '.join(fields[f].strip() for f in ('type', 'color') if _present(fields.get(f)))
    headline = fields.get('name', '').strip()
    if details:
        headline = f"{headline} ({details})"
    return f"{headline}\n{url}" if headline else url


def parse_parents(parental: str) -> list:
    """Split the comma-separated parent names, dropping blanks."""
    return [name.strip() for name in (parental or '').split(',') if name.strip()]


def resolve_parents(flower: dict, all_flowers: list) -> list:
    """Link each parent name to a catalog record by case-insensitive name.

    Returns:
        List of {'name': str, 'id': str | None}
    """
    by_name = {}
    for other in all_flowers:
        if other.get('id') == flower.get('id'):
            continue
        by_name.setdefault((other.get('name') or '').strip().lower(), other.get('id'))

    return [
        {'name': name, 'id': by_name.get(name.lower())}
        for name in parse_parents(flower.get('parental'))
    ]
