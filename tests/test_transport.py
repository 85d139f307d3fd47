import asyncio

import aiohttp
import pytest
from aiohttp import test_utils, web

from cnstrc_client import ConstructorIO
from cnstrc_client.exceptions import HttpError, TransportError
from cnstrc_client.utils.transport import TransportResponse, aiohttp_fetch


async def autocomplete_handler(request):
    if request.query.get('key') != 'key-test':
        return web.json_response({'message': 'You have supplied an invalid `key`.'}, status=401)
    return web.json_response({
        'request': {
            'term': request.match_info['term'],
            'us': request.query.getall('us', []),
            'filters': request.query.getall('filters[brand][]', []),
            'user_agent': request.headers.get('User-Agent'),
        },
        'sections': {'Products': [{'value': 'drill'}]},
        'result_id': 'server-1',
    })


async def item_handler(request):
    form = await request.post()
    return web.json_response({
        'method': request.method,
        'authorization': request.headers.get('Authorization'),
        'files': sorted(form.keys()),
    })


async def empty_handler(request):
    return web.Response(status=204)


def make_app():
    app = web.Application()
    app.router.add_get('/autocomplete/{term}', autocomplete_handler)
    app.router.add_put('/v1/catalog', item_handler)
    app.router.add_delete('/v1/item_groups', empty_handler)
    return app


@pytest.mark.asyncio
async def test_default_transport_round_trip():
    server = test_utils.TestServer(make_app())
    await server.start_server()
    try:
        client = ConstructorIO(
            api_key='key-test',
            client_id='client-1',
            session_id='1',
            service_url=str(server.make_url('/')),
            segments=['a', 'b'],
            api_token='token'
        )

        res = await client.autocomplete.get_autocomplete_results(
            'power drill',
            filters={'brand': ['acme', 'bolt']},
            user_parameters={'user_agent': 'pytest-agent'}
        )
        assert res['request']['term'] == 'power drill'
        assert res['request']['us'] == ['a', 'b']
        assert res['request']['filters'] == ['acme', 'bolt']
        assert res['request']['user_agent'] == 'pytest-agent'
        assert res['sections']['Products'][0]['result_id'] == 'server-1'

        uploaded = await client.catalog.replace_catalog(items=b'id,item_name\n1,Drill\n', variations='id\n1\n')
        assert uploaded['method'] == 'PUT'
        assert uploaded['authorization'] == 'Basic dG9rZW46'
        assert uploaded['files'] == ['items', 'variations']

        assert await client.catalog.remove_item_groups() is None

        client.set_client_options(api_key='wrong-key')
        with pytest.raises(HttpError) as exc_info:
            await client.autocomplete.get_autocomplete_results('drill')
        assert exc_info.value.status == 401
        assert exc_info.value.message == 'You have supplied an invalid `key`.'
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_default_transport_wraps_client_errors(monkeypatch):
    def failing_request(self, *args, **kwargs):
        raise aiohttp.ClientConnectionError('connection refused')

    monkeypatch.setattr(aiohttp.ClientSession, 'request', failing_request)

    with pytest.raises(TransportError, match='connection refused'):
        await aiohttp_fetch('http://127.0.0.1:9/autocomplete/drill', {'method': 'GET'})


@pytest.mark.asyncio
async def test_default_transport_wraps_timeouts(monkeypatch):
    def timing_out_request(self, *args, **kwargs):
        raise asyncio.TimeoutError()

    monkeypatch.setattr(aiohttp.ClientSession, 'request', timing_out_request)

    with pytest.raises(TransportError, match='TimeoutError'):
        await aiohttp_fetch('http://127.0.0.1:9/autocomplete/drill', {'method': 'GET'})


def test_transport_response():
    response = TransportResponse(status=200, text='{"a": 1}')
    assert response.ok
    assert response.json() == {'a': 1}

    assert TransportResponse(status=204, text='').json() is None
    assert not TransportResponse(status=404).ok
