#!/usr/bin/env python3
"""
Fetch the Bitfinex public funding book (P0, aggregated by rate and period) for a given symbol
and store the result as JSON for manual inspection or offline planning.
"""
import argparse
import json
import sys
from pathlib import Path

import requests

API_URL = "https://api-pub.bitfinex.com/v2/book/{symbol}/P0"


def fetch_book(symbol, length):
    response = requests.get(API_URL.format(symbol=symbol), params={"len": length}, timeout=30)
    response.raise_for_status()
    book = response.json()
    if not isinstance(book, list):
        return []
    return book


def main():
    parser = argparse.ArgumentParser(description="Fetch Bitfinex funding book snapshot.")
    parser.add_argument("--symbol", default="fUSD", help="Funding symbol to download, e.g. fUSD")
    parser.add_argument("--length", type=int, default=100, choices=[1, 25, 100, 250],
                        help="Price points per side (default 100)")
    parser.add_argument("--output", default="market_data/funding_book.json",
                        help="Where to store the JSON output")
    args = parser.parse_args()

    try:
        book = fetch_book(args.symbol, args.length)
    except requests.RequestException as exc:
        print(f"Failed to fetch funding book: {exc}", file=sys.stderr)
        sys.exit(1)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [
        {
            "rate": entry[0],
            "period": entry[1],
            "count": entry[2],
            "amount": entry[3],
        }
        for entry in book
        if len(entry) >= 4
    ]
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
    print(f"Saved {len(payload)} book entries to {output_path}")


if __name__ == "__main__":
    main()
