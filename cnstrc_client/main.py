import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from cnstrc_client.client import ConstructorIO
from cnstrc_client.exceptions import ConstructorIOException

logger = logging.getLogger(__name__)

def _parse_filters(values: Optional[List[str]]) -> Optional[Dict[str, List[str]]]:
    """Turn repeated ``facet=value`` arguments into a filters mapping"""
    if not values:
        return None
    filters: Dict[str, List[str]] = {}
    for value in values:
        facet, sep, facet_value = value.partition('=')
        if not sep or not facet or not facet_value:
            raise argparse.ArgumentTypeError(f"Invalid filter '{value}', expected facet=value")
        filters.setdefault(facet, []).append(facet_value)
    return filters

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Constructor.io API client')
    parser.add_argument('--service-url', help='API URL endpoint (defaults to CONSTRUCTORIO_SERVICE_URL)')
    parser.add_argument('--user-id', help='User ID sent with the request')
    parser.add_argument('--segment', action='append', dest='segments', help='User segment, repeatable')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    search = subparsers.add_parser('search', help='Search results for a query')
    search.add_argument('query')
    browse = subparsers.add_parser('browse', help='Browse results for a facet value')
    browse.add_argument('filter_name')
    browse.add_argument('filter_value')
    for sub in (search, browse):
        sub.add_argument('--section', help='Section, e.g. Products')
        sub.add_argument('--page', type=int)
        sub.add_argument('--results-per-page', type=int)
        sub.add_argument('--sort-by')
        sub.add_argument('--sort-order', choices=['ascending', 'descending'])
        sub.add_argument('--filter', action='append', dest='filters', help='facet=value, repeatable')

    autocomplete = subparsers.add_parser('autocomplete', help='Autocomplete suggestions for a query')
    autocomplete.add_argument('query')
    autocomplete.add_argument('--num-results', type=int)

    recommendations = subparsers.add_parser('recommendations', help='Recommendations for a pod')
    recommendations.add_argument('pod_id')
    recommendations.add_argument('--item-id', action='append', dest='item_ids')
    recommendations.add_argument('--num-results', type=int)

    subparsers.add_parser('test-connection', help='Test the API connection')
    return parser

async def run(args: argparse.Namespace) -> Dict[str, Any]:
    client = ConstructorIO.from_env(service_url=args.service_url)
    client.set_client_options(user_id=args.user_id, segments=args.segments)

    if args.command == 'test-connection':
        return await client.test_connection()

    if args.command == 'search':
        return await client.search.get_search_results(
            args.query,
            section=args.section,
            page=args.page,
            results_per_page=args.results_per_page,
            filters=_parse_filters(args.filters),
            sort_by=args.sort_by,
            sort_order=args.sort_order
        )

    if args.command == 'browse':
        return await client.browse.get_browse_results(
            args.filter_name,
            args.filter_value,
            section=args.section,
            page=args.page,
            results_per_page=args.results_per_page,
            filters=_parse_filters(args.filters),
            sort_by=args.sort_by,
            sort_order=args.sort_order
        )

    if args.command == 'autocomplete':
        return await client.autocomplete.get_autocomplete_results(args.query, num_results=args.num_results)

    return await client.recommendations.get_recommendation_results(
        args.pod_id,
        item_ids=args.item_ids,
        num_results=args.num_results
    )

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        result = asyncio.run(run(args))
    except (ConstructorIOException, argparse.ArgumentTypeError) as e:
        logger.error(f"Request failed: {e}")
        return 1

    print(json.dumps(result, indent=2))
    if args.command == 'test-connection' and result.get('status') != 'success':
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
