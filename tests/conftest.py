import copy
import json
from urllib.parse import parse_qsl, unquote, urlsplit

import pytest

from cnstrc_client import ConstructorIO

API_KEY = 'key-test'
CLIENT_ID = '2b23dd74-5672-4379-878c-9182938d2710'
SESSION_ID = '2'


class FakeResponse:
    def __init__(self, status=200, body=None, text=None, reason='OK', url=''):
        self.status = status
        self.reason = reason
        self.url = url
        self._body = body
        self._text = text

    @property
    def ok(self):
        return 200 <= self.status < 300

    def json(self):
        if self._text is not None:
            return json.loads(self._text) if self._text.strip() else None
        return copy.deepcopy(self._body)


class SpyTransport:
    """Records every call and answers with a canned or computed response"""

    def __init__(self, response=None, handler=None):
        self.calls = []
        self.response = response
        self.handler = handler

    async def __call__(self, url, options):
        self.calls.append((url, options))
        if self.handler is not None:
            return self.handler(url, options)
        return self.response or FakeResponse(body={})

    @property
    def called(self):
        return bool(self.calls)

    @property
    def last_url(self):
        return self.calls[-1][0]

    @property
    def last_options(self):
        return self.calls[-1][1]

    @property
    def last_path(self):
        return unquote(urlsplit(self.last_url).path)

    @property
    def last_pairs(self):
        return parse_qsl(urlsplit(self.last_url).query, keep_blank_values=True)

    @property
    def last_params(self):
        """Query params, repeated keys collected into lists"""
        params = {}
        for key, value in self.last_pairs:
            if key in params:
                existing = params[key]
                params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
            else:
                params[key] = value
        return params


def echo_handler(body_factory):
    """Answer with a body built from the request query, like the live API echoing ``request``"""

    def _handler(url, options):
        pairs = parse_qsl(urlsplit(url).query, keep_blank_values=True)
        request = {}
        for key, value in pairs:
            if key == 'us':
                request.setdefault('us', []).append(value)
            else:
                request[key] = value
        return FakeResponse(body=body_factory(request), url=url)

    return _handler


def search_body(request):
    return {
        'request': request,
        'response': {
            'results': [
                {'value': 'Cordless Drill', 'data': {'id': '1'}},
                {'value': 'Hammer Drill', 'data': {'id': '2'}},
            ],
            'facets': [],
        },
        'result_id': 'abc',
    }


def autocomplete_body(request):
    return {
        'request': request,
        'sections': {
            'Products': [{'value': 'drill'}, {'value': 'drill bits'}],
            'Search Suggestions': [{'value': 'drills'}],
        },
        'result_id': 'ac-123',
    }


@pytest.fixture
def search_spy():
    return SpyTransport(handler=echo_handler(search_body))


@pytest.fixture
def autocomplete_spy():
    return SpyTransport(handler=echo_handler(autocomplete_body))


@pytest.fixture
def make_client():
    def _make(fetch, **kwargs):
        options = {'api_key': API_KEY, 'client_id': CLIENT_ID, 'session_id': SESSION_ID}
        options.update(kwargs)
        return ConstructorIO(fetch=fetch, **options)

    return _make
