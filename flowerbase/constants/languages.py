"""Languages offered for translation and voice-over.

Each language has a speech code (used by the browser speech synthesizer),
a translation code (used by the translation backends and the AI cache keys)
and an English name (used in prompts).
"""

from collections import namedtuple

Language = namedtuple('Language', ['name', 'label', 'speech_code', 'translation_code'])

LANGUAGES = [
    Language('English', 'English', 'en-IN', 'en'),
    Language('Hindi', 'हिन्दी (Hindi)', 'hi-IN', 'hi'),
    Language('Tamil', 'தமிழ் (Tamil)', 'ta-IN', 'ta'),
    Language('Telugu', 'తెలుగు (Telugu)', 'te-IN', 'te'),
    Language('Bengali', 'বাংলা (Bengali)', 'bn-IN', 'bn'),
    Language('Marathi', 'मराठी (Marathi)', 'mr-IN', 'mr'),
    Language('Gujarati', 'ગુજરાતી (Gujarati)', 'gu-IN', 'gu'),
    Language('Kannada', 'ಕನ್ನಡ (Kannada)', 'kn-IN', 'kn'),
    Language('Malayalam', 'മലയാളം (Malayalam)', 'ml-IN', 'ml'),
    Language('Punjabi', 'ਪੰਜਾਬੀ (Punjabi)', 'pa-IN', 'pa'),
]

BASE_LANGUAGE = LANGUAGES[0]
BASE_LANGUAGE_CODE = BASE_LANGUAGE.translation_code

_LOOKUP = {}
for _lang in LANGUAGES:
    for _alias in (_lang.name, _lang.speech_code, _lang.translation_code):
        _LOOKUP[_alias.lower()] = _lang


def resolve_language(value):
    """Return the Language for a name, speech code or translation code.

    None or an empty value resolves to the base language. Unknown values
    return None.
    """
    if value is None or not str(value).strip():
        return BASE_LANGUAGE
    return _LOOKUP.get(str(value).strip().lower())


def is_base_language(value) -> bool:
    return resolve_language(value) == BASE_LANGUAGE
