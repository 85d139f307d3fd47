import pytest

from conftest import FakeResponse, SpyTransport, echo_handler
from cnstrc_client.exceptions import MalformedResponseError, ValidationError


@pytest.mark.asyncio
async def test_autocomplete_results(autocomplete_spy, make_client):
    client = make_client(autocomplete_spy)

    res = await client.autocomplete.get_autocomplete_results(
        'dri',
        num_results=10,
        results_per_section={'Products': 6, 'Search Suggestions': 4},
        filters={'brand': ['acme']}
    )

    assert autocomplete_spy.last_path == '/autocomplete/dri'
    params = autocomplete_spy.last_params
    assert params['num_results'] == '10'
    assert params['num_results_Products'] == '6'
    assert params['num_results_Search Suggestions'] == '4'
    assert params['filters[brand][]'] == 'acme'

    for items in res['sections'].values():
        for item in items:
            assert item['result_id'] == 'ac-123'


@pytest.mark.asyncio
async def test_autocomplete_requires_sections(make_client):
    client = make_client(SpyTransport(FakeResponse(body={'result_id': 'x', 'results': []})))

    with pytest.raises(MalformedResponseError, match='get_autocomplete_results response data is malformed'):
        await client.autocomplete.get_autocomplete_results('dri')


@pytest.mark.asyncio
async def test_autocomplete_without_result_id(make_client):
    client = make_client(SpyTransport(FakeResponse(body={'sections': {'Products': [{'value': 'drill'}]}})))

    res = await client.autocomplete.get_autocomplete_results('dri')

    assert 'result_id' not in res['sections']['Products'][0]


@pytest.mark.asyncio
@pytest.mark.parametrize('params', [
    {'num_results': 'ten'},
    {'results_per_section': {'Products': 0}},
    {'results_per_section': 'Products'},
    {'filters': {'brand': []}},
])
async def test_autocomplete_invalid_parameters(make_client, params):
    spy = SpyTransport()
    client = make_client(spy)

    with pytest.raises(ValidationError):
        await client.autocomplete.get_autocomplete_results('dri', **params)

    assert not spy.called


@pytest.mark.asyncio
async def test_browse_results(make_client):
    spy = SpyTransport(handler=echo_handler(lambda request: {
        'request': request,
        'response': {'results': [{'value': 'Drill'}], 'total_num_results': 1},
        'result_id': 'browse-1',
    }))
    client = make_client(spy)

    res = await client.browse.get_browse_results(
        'group_id',
        'power tools',
        section='Products',
        page=2,
        results_per_page=24,
        sort_by='price',
        sort_order='descending'
    )

    assert spy.last_path == '/browse/group_id/power tools'
    assert '/browse/group_id/power%20tools?' in spy.last_url
    assert spy.last_params['page'] == '2'
    assert spy.last_params['num_results_per_page'] == '24'
    assert spy.last_params['sort_order'] == 'descending'
    assert res['response']['results'][0]['result_id'] == 'browse-1'


@pytest.mark.asyncio
async def test_browse_passes_through_other_shapes(make_client):
    body = {'result_id': 'browse-2', 'response': {'facets': []}}
    client = make_client(SpyTransport(FakeResponse(body=body)))

    assert await client.browse.get_browse_results('group_id', '123') == body


@pytest.mark.asyncio
@pytest.mark.parametrize('filter_name, filter_value', [
    (None, 'value'),
    ('group_id', ''),
    ('group_id', 123),
])
async def test_browse_requires_filter_name_and_value(make_client, filter_name, filter_value):
    spy = SpyTransport()
    client = make_client(spy)

    with pytest.raises(ValidationError):
        await client.browse.get_browse_results(filter_name, filter_value)

    assert not spy.called


@pytest.mark.asyncio
async def test_recommendation_results(make_client):
    spy = SpyTransport(handler=echo_handler(lambda request: {
        'request': request,
        'response': {'pod': {'id': 'item_page_1'}, 'results': [{'value': 'Drill'}, {'value': 'Saw'}]},
        'result_id': 'rec-1',
    }))
    client = make_client(spy)

    res = await client.recommendations.get_recommendation_results(
        'item_page_1',
        item_ids=['item-1', 'item-2'],
        num_results=2,
        section='Products'
    )

    assert spy.last_path == '/recommendations/v1/pods/item_page_1'
    assert [v for k, v in spy.last_pairs if k == 'item_id'] == ['item-1', 'item-2']
    assert spy.last_params['num_results'] == '2'
    assert all(item['result_id'] == 'rec-1' for item in res['response']['results'])


@pytest.mark.asyncio
async def test_recommendation_single_item_id(make_client):
    spy = SpyTransport(FakeResponse(body={'response': {'results': []}}))
    client = make_client(spy)

    await client.recommendations.get_recommendation_results('home', item_ids='item-1', term='drill')

    assert spy.last_params['item_id'] == 'item-1'
    assert spy.last_params['term'] == 'drill'


@pytest.mark.asyncio
async def test_recommendations_require_pod_id(make_client):
    spy = SpyTransport()
    client = make_client(spy)

    with pytest.raises(ValidationError, match='pod_id'):
        await client.recommendations.get_recommendation_results(None)

    assert not spy.called
