"""Create DynamoDB tables and seed the front-desk knowledge base.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from datetime import UTC, datetime
from typing import Any

import boto3

from frontdesk.persistence.dynamodb_backend import DynamoDBKnowledgeStore, create_tables
from frontdesk.persistence.seed import DEFAULT_SEED_PATH, seed_knowledge


def seed(ddb: Any, suffix: str = "", region: str = "us-east-1",
         endpoint_url: str | None = None, seed_path: str = str(DEFAULT_SEED_PATH)) -> int:
    """Create missing tables and upsert the seed entries; returns entries written."""
    for table_name in create_tables(ddb, suffix=suffix):
        print(f"  Created table {table_name}")
    store = DynamoDBKnowledgeStore(table_suffix=suffix, region=region, endpoint_url=endpoint_url)
    count = seed_knowledge(store, seed_path, datetime.now(UTC))
    print(f"  Seeded {count} knowledge entries")
    return count


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for FrontDesk")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--seed-file", default=str(DEFAULT_SEED_PATH), help="Knowledge seed JSON")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables and seeding knowledge...")
    seed(ddb, suffix=args.table_suffix, region=args.region,
         endpoint_url=args.endpoint_url, seed_path=args.seed_file)
    print("Done!")


if __name__ == "__main__":
    main()
