"""Gemini AI service: translation, summaries, chat and image analysis."""
import os
import re
import json
import time
import logging
import requests

from flowerbase.constants import resolve_language, is_base_language
from flowerbase.exceptions import (
    ProviderNotConfiguredError,
    ProviderResponseError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

# Configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY', '')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash-lite')
GEMINI_API_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'
GEMINI_TIMEOUT = float(os.environ.get('GEMINI_TIMEOUT', 30))

# Description + care shorter than this gets expanded instead of summarized
SUMMARIZE_THRESHOLD = 200

# Chat turns sent back as context
CHAT_HISTORY_TURNS = 6

CONTENT_TYPES = ('summarized', 'expanded')

# Track API key validity; once we know the key is bad, stop calling Gemini
_api_key_invalid = False

# Circuit breaker: after N consecutive failures, pause for a cooldown
_consecutive_failures = 0
_MAX_CONSECUTIVE_FAILURES = 3
_failure_cooldown_until = 0  # timestamp when we can retry
_COOLDOWN_SECONDS = 300      # 5 minutes


def is_gemini_configured() -> bool:
    """Check if the Gemini API key is set."""
    return bool(GEMINI_API_KEY and GEMINI_API_KEY.strip())


def _is_circuit_open() -> bool:
    """Check if we should skip calls due to too many failures."""
    global _consecutive_failures, _failure_cooldown_until

    if _api_key_invalid:
        return True

    if _consecutive_failures >= _MAX_CONSECUTIVE_FAILURES:
        if time.time() < _failure_cooldown_until:
            return True
        # Cooldown expired, reset and allow retry
        _consecutive_failures = 0
        _failure_cooldown_until = 0
        logger.info("Gemini circuit breaker reset, retrying")

    return False


def _record_success():
    global _consecutive_failures
    _consecutive_failures = 0


def _record_failure(permanent: bool = False):
    global _consecutive_failures, _failure_cooldown_until, _api_key_invalid

    if permanent:
        _api_key_invalid = True
        logger.error(
            "Gemini API key is INVALID. AI features are now DISABLED. "
            "Set a valid GEMINI_API_KEY and restart."
        )
        return

    _consecutive_failures += 1
    if _consecutive_failures >= _MAX_CONSECUTIVE_FAILURES:
        _failure_cooldown_until = time.time() + _COOLDOWN_SECONDS
        logger.warning(
            f"Gemini failed {_consecutive_failures} times in a row. "
            f"Pausing for {_COOLDOWN_SECONDS}s."
        )


def reset_circuit_breaker():
    """Forget recorded failures (used after rotating the key and in tests)."""
    global _consecutive_failures, _failure_cooldown_until, _api_key_invalid
    _consecutive_failures = 0
    _failure_cooldown_until = 0
    _api_key_invalid = False


def _build_parts(prompt: str, image_base64: str = None) -> list:
    parts = [{'text': prompt}]
    if image_base64:
        # Remove data URL prefix if present
        data = image_base64.split('base64,', 1)[1] if 'base64,' in image_base64 else image_base64
        parts.insert(0, {'inline_data': {'mime_type': 'image/jpeg', 'data': data}})
    return parts


def call_gemini(prompt: str, image_base64: str = None) -> str:
    """Send one prompt (optionally with an image) and return the reply text.

    Raises:
        ProviderNotConfiguredError: no API key
        ProviderUnavailableError: circuit open, network or HTTP failure
        ProviderResponseError: reply without text
    """
    if not is_gemini_configured():
        raise ProviderNotConfiguredError('Gemini API key not configured')

    if _is_circuit_open():
        raise ProviderUnavailableError('Gemini is temporarily unavailable')

    body = {
        'contents': [{'parts': _build_parts(prompt, image_base64)}],
        'generationConfig': {
            'temperature': 0.7,
            'maxOutputTokens': 2048,
        },
    }

    try:
        response = requests.post(
            GEMINI_API_URL.format(model=GEMINI_MODEL),
            params={'key': GEMINI_API_KEY},
            json=body,
            timeout=GEMINI_TIMEOUT,
        )
    except requests.Timeout as e:
        logger.warning("Gemini timeout")
        _record_failure()
        raise ProviderUnavailableError('Gemini request timed out') from e
    except requests.RequestException as e:
        logger.warning(f"Gemini request error: {e}")
        _record_failure()
        raise ProviderUnavailableError(f'Gemini request failed: {e}') from e

    try:
        result = response.json()
    except ValueError:
        result = {}

    if not response.ok:
        error = result.get('error', {}) if isinstance(result, dict) else {}
        message = error.get('message') or f'Gemini API error ({response.status_code})'
        details = error.get('details', []) or []
        if any(d.get('reason') == 'API_KEY_INVALID' for d in details if isinstance(d, dict)):
            _record_failure(permanent=True)
        else:
            _record_failure()
        logger.warning(f"Gemini error: {message}")
        raise ProviderUnavailableError(message)

    _record_success()

    try:
        return result['candidates'][0]['content']['parts'][0]['text'] or ''
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderResponseError('Gemini returned no text') from e


def _extract_json(text: str, array: bool = False):
    """Parse the first JSON object (or array) embedded in a reply."""
    pattern = r'\[[\s\S]*\]' if array else r'\{[\s\S]*\}'
    match = re.search(pattern, text or '')
    if not match:
        raise ProviderResponseError('Failed to parse AI response')
    try:
        return json.loads(match.group(0))
    except ValueError as e:
        raise ProviderResponseError(f'Failed to parse AI response: {e}') from e


def _flower_lines(flower: dict, fallback: bool = True) -> str:
    def value(field, default):
        return flower.get(field) or (default if fallback else '')

    return (
        f"- Name: {value('name', 'Unknown')}\n"
        f"- Type: {value('type', 'Not specified')}\n"
        f"- Color: {value('color', 'Not specified')}\n"
        f"- Description: {value('description', 'No description')}\n"
        f"- Blooming Season: {value('bloomingSeason', 'Not specified')}\n"
        f"- Care Instructions: {value('careInstructions', 'Not specified')}"
    )


TRANSLATED_FIELDS = ('name', 'type', 'color', 'description', 'bloomingSeason', 'careInstructions')


def translate_flower_content(flower: dict, target_language) -> dict:
    """
    Translate the displayable fields of a flower.

    Args:
        flower: Flower dict
        target_language: Language name or code ('Hindi', 'hi', 'hi-IN')

    Returns:
        Dict of translated fields, or None for the base language
    """
    language = resolve_language(target_language)
    if language is None:
        raise ValueError(f'Unsupported language: {target_language}')
    if is_base_language(language.translation_code):
        return None

    prompt = f"""Translate the following flower information to {language.name}.
Return ONLY a JSON object with the translated fields. No explanations.

Flower Information:
{_flower_lines(flower, fallback=False)}

Return JSON format:
{{
  "name": "translated name",
  "type": "translated type",
  "color": "translated color",
  "description": "translated description",
  "bloomingSeason": "translated season",
  "careInstructions": "translated care"
}}"""

    result = _extract_json(call_gemini(prompt))
    if not isinstance(result, dict):
        raise ProviderResponseError('Translation response is not an object')

    return {
        field: result[field].strip()
        for field in TRANSLATED_FIELDS
        if isinstance(result.get(field), str)
    }


def validate_summary(result) -> dict:
    """Check the shape of a summarize/expand payload and normalize it.

    Raises:
        ProviderResponseError: unknown type or missing key points
    """
    if not isinstance(result, dict) or result.get('type') not in CONTENT_TYPES:
        raise ProviderResponseError('Summary response has no valid type')

    key_points = result.get('keyPoints')
    if not isinstance(key_points, list):
        raise ProviderResponseError('Summary response has no key points')

    summary = {
        'type': result['type'],
        'keyPoints': [str(p).strip() for p in key_points if str(p).strip()],
    }
    for field in ('quickCare', 'bestFor', 'description', 'careInstructions'):
        if isinstance(result.get(field), str) and result[field].strip():
            summary[field] = result[field].strip()
    return summary


def summarize_flower_content(flower: dict) -> dict:
    """Summarize long flower content, or expand short content.

    Returns:
        {'type': 'summarized', 'keyPoints', 'quickCare', 'bestFor'} or
        {'type': 'expanded', 'keyPoints', 'description', 'careInstructions'}
    """
    total_length = len(flower.get('description') or '') + len(flower.get('careInstructions') or '')

    if total_length < SUMMARIZE_THRESHOLD:
        prompt = f"""You are Flora, a flower expert. The following flower has brief information.
Please expand and enrich the content with more details, interesting facts, and care tips.

Current Flower Information:
{_flower_lines(flower)}

Return ONLY a JSON object with enriched content:
{{
  "type": "expanded",
  "keyPoints": ["3-5 key facts about this flower"],
  "description": "A detailed 2-3 paragraph description with interesting facts, history, and characteristics",
  "careInstructions": "Comprehensive care guide with watering, sunlight, soil, and seasonal tips"
}}"""
    else:
        prompt = f"""You are Flora, a flower expert. Summarize the following flower information into concise key points.

Flower Information:
{_flower_lines(flower)}

Return ONLY a JSON object with summarized content:
{{
  "type": "summarized",
  "keyPoints": ["5-7 most important key points about this flower, each 1 short sentence"],
  "quickCare": "One sentence care summary",
  "bestFor": "What this flower is best for (e.g., gardens, bouquets, beginners)"
}}"""

    return validate_summary(_extract_json(call_gemini(prompt)))


def chat_with_flora(user_message: str, flower: dict = None, chat_history=()) -> str:
    """Answer a question as Flora, using the current flower as context."""
    flower_context = ''
    if flower:
        flower_context = (
            "\nCURRENT FLOWER CONTEXT:\n"
            f"{_flower_lines(flower)}\n"
            f"- Category: {flower.get('category') or 'Not specified'}\n"
        )

    history_context = ''
    history = list(chat_history or [])[-CHAT_HISTORY_TURNS:]
    if history:
        history_context = '\nCONVERSATION HISTORY:\n'
        for msg in history:
            speaker = 'User' if msg.get('role') == 'user' else 'Flora'
            history_context += f"{speaker}: {msg.get('content', '')}\n"

    prompt = f"""You are Flora, a friendly and knowledgeable AI assistant for the Flower Base app.
You are an expert on flowers, plants, gardening, and botanical topics.
Your personality is warm, helpful, and passionate about flowers.
{flower_context}
{history_context}
GUIDELINES:
- Be concise but informative (2-4 sentences unless more detail is requested)
- If the user asks about the current flower, use the context provided above
- Be enthusiastic about flowers and gardening
- If you don't know something, say so honestly
- You can suggest related flowers, care tips, or interesting facts
- Use flower emojis occasionally to be friendly 🌸🌺🌻

User's question: {user_message}

Respond as Flora:"""

    return call_gemini(prompt).strip()


def chat_greeting(flower: dict = None) -> str:
    """Opening message of a chat session."""
    if flower:
        return (
            f"Hi! I'm Flora 🌸 I see you're looking at {flower.get('name')}. "
            "What would you like to know about this beautiful flower?"
        )
    return "Hi! I'm Flora 🌸 Your friendly flower expert! How can I help you today?"


def generate_flower_description(image_base64: str) -> dict:
    """Fill in the flower form from a photo."""
    prompt = """Analyze this flower image and provide detailed information.
Return ONLY a JSON object with no additional text or explanation.

Required JSON format:
{
  "name": "Flower name (common name)",
  "scientificName": "Scientific/botanical name if known",
  "type": "Flower family or type",
  "color": "Primary color(s) of the flower",
  "description": "A detailed 2-3 paragraph description of the flower, its characteristics, history, and significance",
  "bloomingSeason": "When this flower typically blooms",
  "careInstructions": "Basic care tips for growing this flower"
}"""

    result = _extract_json(call_gemini(prompt, image_base64))
    if not isinstance(result, dict) or not result.get('name'):
        raise ProviderResponseError('Description response has no flower name')
    return result


def identify_flower(image_base64: str) -> dict:
    """Identify the flower in a photo."""
    prompt = """Identify this flower in the image.
Return ONLY a JSON object with the following information:

{
  "name": "Common name of the flower",
  "scientificName": "Scientific name",
  "confidence": "high/medium/low",
  "description": "Brief 1-2 sentence description",
  "similarFlowers": ["Similar flower 1", "Similar flower 2"]
}"""

    result = _extract_json(call_gemini(prompt, image_base64))
    if not isinstance(result, dict) or not result.get('name'):
        raise ProviderResponseError('Failed to identify flower')
    return result


def get_care_recommendations(flower_name: str, climate: str = '') -> str:
    """Practical growing tips for a flower, optionally for a climate."""
    climate_text = f' in {climate} climate' if climate else ''
    prompt = f"""Provide practical care tips for growing {flower_name}{climate_text}.
Include:
- Watering frequency
- Sunlight requirements
- Soil type
- Best planting time
- Common problems and solutions

Keep it concise and practical."""

    return call_gemini(prompt).strip()


def get_flower_facts(flower_name: str) -> list:
    """Five fun facts about a flower. Empty list when anything goes wrong."""
    prompt = f"""Give me 5 interesting and unique facts about {flower_name}.
Return ONLY a JSON array of strings, no explanations:
["fact 1", "fact 2", "fact 3", "fact 4", "fact 5"]"""

    try:
        facts = _extract_json(call_gemini(prompt), array=True)
    except Exception as e:
        logger.warning(f"Fun facts error: {e}")
        return []

    if not isinstance(facts, list):
        return []
    return [str(f) for f in facts]
