"""
Example: Stream generated records to a CSV file.

Usage:
    python examples/stream_to_csv.py
"""

import asyncio
from pathlib import Path

from outport import outport


async def generate_orders(count: int):
    """Simulate a paginated upstream API."""
    for i in range(1, count + 1):
        if i % 250 == 0:
            await asyncio.sleep(0.01)
        yield {
            "id": i,
            "customer": {"name": f"Customer {i % 37}", "country": "NL"},
            "items": [f"sku-{i % 11}", f"sku-{i % 5}"],
            "paid": i % 3 != 0,
        }


async def main():
    output = Path("./orders.csv")

    result = await (
        outport()
        .to(str(output))
        .with_flattening()
        .with_column_mapping({"customer_name": "Customer", "customer_country": "Country"})
        .with_batch_size(500)
        .on_progress(lambda current, total=None: print(f"  {current} records written"))
        .from_async_generator(generate_orders(2_000))
    )

    if not result.success:
        print(f"\n❌ Export failed: {result.error}")
        return

    print(f"\n✅ {result.value} records exported to: {output.absolute()}")


if __name__ == "__main__":
    asyncio.run(main())
