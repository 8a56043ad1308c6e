"""Create the LoanFlow DynamoDB tables.

Usage:
    python scripts/create_tables.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

from loanflow.persistence.dynamodb_tables import TABLE_NAMES, create_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Create DynamoDB tables for LoanFlow")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    created = create_tables(ddb, suffix=args.table_suffix)
    for base in TABLE_NAMES:
        name = f"{base}{args.table_suffix}"
        print(f"  {'Created' if name in created else 'Exists '} {name}")
    print("Done!")


if __name__ == "__main__":
    main()
