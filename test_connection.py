import asyncio
import json
import sys

from cnstrc_client import ConstructorIO

async def check_connection():
    client = ConstructorIO.from_env()
    try:
        result = await client.test_connection()
        print(json.dumps(result, indent=2))

        if result['status'] == 'success':
            response = await client.autocomplete.get_autocomplete_results('drill', num_results=5)
            print('Connection successful!')
            for section, items in response.get('sections', {}).items():
                print(f"\n{section}:")
                for item in items:
                    print(f"- {item.get('value')}")
        return result['status'] == 'success'
    finally:
        print(f"\nMetrics: {client.metrics.to_json()}")

if __name__ == '__main__':
    sys.exit(0 if asyncio.run(check_connection()) else 1)
