"""
Tests for the Gemini client and the translation providers.
"""

import json

import pytest
import requests

from flowerbase.exceptions import (
    ProviderNotConfiguredError,
    ProviderResponseError,
    ProviderUnavailableError,
)
from flowerbase.services import gemini, translation


class FakeResponse:

    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


def reply(text):
    return FakeResponse({'candidates': [{'content': {'parts': [{'text': text}]}}]})


@pytest.fixture
def posted(monkeypatch, gemini_configured):
    """Capture Gemini HTTP calls; set ``responses`` to control replies."""
    calls = []
    responses = []

    def fake_post(url, params=None, json=None, timeout=None):
        calls.append({'url': url, 'params': params, 'json': json})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(gemini.requests, 'post', fake_post)
    return calls, responses


class TestCallGemini:

    def test_returns_reply_text(self, posted):
        calls, responses = posted
        responses.append(reply('Hello'))

        assert gemini.call_gemini('Hi') == 'Hello'
        assert calls[0]['params'] == {'key': 'test-gemini-key'}
        assert calls[0]['url'].endswith(f'{gemini.GEMINI_MODEL}:generateContent')
        assert calls[0]['json']['contents'][0]['parts'] == [{'text': 'Hi'}]

    def test_image_goes_first_without_data_url_prefix(self, posted):
        calls, responses = posted
        responses.append(reply('{}'))

        gemini.call_gemini('What is this?', 'data:image/jpeg;base64,QUJD')

        parts = calls[0]['json']['contents'][0]['parts']
        assert parts[0] == {'inline_data': {'mime_type': 'image/jpeg', 'data': 'QUJD'}}
        assert parts[1] == {'text': 'What is this?'}

    def test_not_configured(self):
        with pytest.raises(ProviderNotConfiguredError):
            gemini.call_gemini('Hi')

    def test_http_error(self, posted):
        _, responses = posted
        responses.append(FakeResponse({'error': {'message': 'Resource exhausted'}}, status_code=429))

        with pytest.raises(ProviderUnavailableError, match='Resource exhausted'):
            gemini.call_gemini('Hi')

    def test_network_error(self, posted):
        _, responses = posted
        responses.append(requests.ConnectionError('unreachable'))

        with pytest.raises(ProviderUnavailableError):
            gemini.call_gemini('Hi')

    def test_reply_without_candidates(self, posted):
        _, responses = posted
        responses.append(FakeResponse({'candidates': []}))

        with pytest.raises(ProviderResponseError):
            gemini.call_gemini('Hi')


class TestCircuitBreaker:

    def test_opens_after_consecutive_failures(self, posted):
        calls, responses = posted
        responses.extend([requests.Timeout()] * 3)

        for _ in range(3):
            with pytest.raises(ProviderUnavailableError):
                gemini.call_gemini('Hi')

        with pytest.raises(ProviderUnavailableError, match='temporarily unavailable'):
            gemini.call_gemini('Hi')
        assert len(calls) == 3

    def test_closes_after_cooldown(self, posted, monkeypatch):
        calls, responses = posted
        responses.extend([requests.Timeout()] * 3 + [reply('Back')])
        now = [1000.0]
        monkeypatch.setattr(gemini.time, 'time', lambda: now[0])

        for _ in range(3):
            with pytest.raises(ProviderUnavailableError):
                gemini.call_gemini('Hi')

        now[0] += gemini._COOLDOWN_SECONDS + 1
        assert gemini.call_gemini('Hi') == 'Back'

    def test_success_resets_failure_count(self, posted):
        _, responses = posted
        responses.extend([requests.Timeout(), requests.Timeout(), reply('ok'), requests.Timeout(), reply('ok')])

        for _ in range(2):
            with pytest.raises(ProviderUnavailableError):
                gemini.call_gemini('Hi')
        gemini.call_gemini('Hi')
        with pytest.raises(ProviderUnavailableError):
            gemini.call_gemini('Hi')

        assert gemini.call_gemini('Hi') == 'ok'

    def test_invalid_key_disables_provider(self, posted):
        calls, responses = posted
        responses.append(FakeResponse({'error': {
            'message': 'API key not valid.',
            'details': [{'reason': 'API_KEY_INVALID'}],
        }}, status_code=400))

        with pytest.raises(ProviderUnavailableError):
            gemini.call_gemini('Hi')
        with pytest.raises(ProviderUnavailableError, match='temporarily unavailable'):
            gemini.call_gemini('Hi')
        assert len(calls) == 1


class TestStructuredReplies:

    def test_extract_json_from_chatty_reply(self):
        text = 'Sure! Here you go:\n```json\n{"name": "Rose"}\n```'

        assert gemini._extract_json(text) == {'name': 'Rose'}

    def test_extract_json_array(self):
        assert gemini._extract_json('Facts: ["a", "b"]', array=True) == ['a', 'b']

    def test_extract_json_without_json(self):
        with pytest.raises(ProviderResponseError):
            gemini._extract_json('No idea.')

    def test_translation_keeps_only_string_fields(self, monkeypatch, gemini_configured):
        monkeypatch.setattr(gemini, 'call_gemini', lambda prompt, image_base64=None: json.dumps({
            'name': ' गुलाब ', 'color': 7, 'extra': 'x',
        }))

        result = gemini.translate_flower_content({'name': 'Rose'}, 'Hindi')

        assert result == {'name': 'गुलाब'}

    def test_translation_to_base_language(self):
        assert gemini.translate_flower_content({'name': 'Rose'}, 'en') is None

    @pytest.mark.parametrize('length, expected', [(50, 'expanded'), (400, 'summarized')])
    def test_summary_mode_depends_on_content_length(self, monkeypatch, gemini_configured, length, expected):
        prompts = []

        def fake_call(prompt, image_base64=None):
            prompts.append(prompt)
            return json.dumps({'type': expected, 'keyPoints': ['one', ' ', 'two']})

        monkeypatch.setattr(gemini, 'call_gemini', fake_call)
        flower = {'name': 'Rose', 'description': 'x' * length, 'careInstructions': ''}

        result = gemini.summarize_flower_content(flower)

        assert result == {'type': expected, 'keyPoints': ['one', 'two']}
        assert f'"type": "{expected}"' in prompts[0]

    def test_validate_summary_rejects_unknown_type(self):
        with pytest.raises(ProviderResponseError):
            gemini.validate_summary({'type': 'poem', 'keyPoints': []})

    def test_validate_summary_requires_key_points(self):
        with pytest.raises(ProviderResponseError):
            gemini.validate_summary({'type': 'summarized'})

    def test_facts_swallow_errors(self, monkeypatch, gemini_configured):
        def broken(prompt, image_base64=None):
            raise ProviderUnavailableError('down')

        monkeypatch.setattr(gemini, 'call_gemini', broken)

        assert gemini.get_flower_facts('Rose') == []

    def test_chat_sends_recent_history_only(self, monkeypatch, gemini_configured):
        prompts = []
        monkeypatch.setattr(gemini, 'call_gemini', lambda prompt, image_base64=None: prompts.append(prompt) or ' Hi! ')
        history = [{'role': 'user', 'content': f'question {i}'} for i in range(10)]

        answer = gemini.chat_with_flora('Why red?', {'name': 'Rose'}, history)

        assert answer == 'Hi!'
        assert 'question 9' in prompts[0]
        assert 'question 3' not in prompts[0]
        assert '- Name: Rose' in prompts[0]


class TestSplitText:

    def test_short_text_is_one_chunk(self):
        assert translation.split_text('Water daily.') == ['Water daily.']

    def test_splits_on_sentence_boundaries(self):
        text = 'First sentence here. Second one! Third?'

        chunks = translation.split_text(text, max_size=25)

        assert chunks == ['First sentence here.', 'Second one! Third?']
        assert all(len(c) <= 25 for c in chunks)

    def test_long_sentence_is_cut(self):
        chunks = translation.split_text('a' * 1000)

        assert [len(c) for c in chunks] == [450, 450, 100]


class TestMyMemory:

    @pytest.fixture
    def mymemory(self, monkeypatch):
        monkeypatch.setattr(translation, 'TRANSLATION_SERVICE', 'mymemory')
        calls = []
        responses = []

        def fake_get(url, params=None, timeout=None):
            calls.append(params)
            return responses.pop(0) if responses else FakeResponse({
                'responseStatus': 200,
                'responseData': {'translatedText': f"[{params['q']}]"},
            })

        monkeypatch.setattr(translation.requests, 'get', fake_get)
        return calls, responses

    def test_enabled_without_key(self, mymemory):
        assert translation.is_translation_enabled() is True

    def test_translates_each_field(self, mymemory):
        calls, _ = mymemory

        result = translation.translate_flower({'name': 'Rose', 'color': 'Red', 'type': ''}, 'Tamil')

        assert result == {'name': '[Rose]', 'color': '[Red]'}
        assert calls[0]['langpair'] == 'en|ta'

    def test_quota_warning_is_an_error(self, mymemory):
        _, responses = mymemory
        responses.append(FakeResponse({
            'responseStatus': 200,
            'responseData': {'translatedText': 'MYMEMORY WARNING: YOU USED ALL AVAILABLE FREE TRANSLATIONS'},
        }))

        with pytest.raises(ProviderUnavailableError):
            translation.mymemory_translate('Rose', 'hi')

    def test_bad_status_is_an_error(self, mymemory):
        _, responses = mymemory
        responses.append(FakeResponse({'responseStatus': 403, 'responseData': {'translatedText': ''}}))

        with pytest.raises(ProviderUnavailableError):
            translation.mymemory_translate('Rose', 'hi')

    def test_unsupported_language(self, mymemory):
        with pytest.raises(ValueError):
            translation.translate_flower({'name': 'Rose'}, 'Klingon')

    def test_base_language(self, mymemory):
        calls, _ = mymemory

        assert translation.translate_flower({'name': 'Rose'}, 'English') is None
        assert calls == []

    def test_unknown_service(self, monkeypatch):
        monkeypatch.setattr(translation, 'TRANSLATION_SERVICE', 'babelfish')

        assert translation.is_translation_enabled() is False
        with pytest.raises(ProviderNotConfiguredError):
            translation.translate_flower({'name': 'Rose'}, 'hi')
