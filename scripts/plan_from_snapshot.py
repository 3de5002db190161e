#!/usr/bin/env python3
"""
Load a funding book JSON snapshot (produced by fetch_funding_book.py) and print the offers
the bot would place for it, without any credentials.
"""

import argparse
import json
import sys
from pathlib import Path

import json5

from fundingrenew.Data import rate_stringify
from fundingrenew.MarketAnalysis import (FundingOfferPlanner, PlanningError, RATE_MIN,
                                         aggregate_period_stats)


def load_snapshot(path):
    with Path(path).open('r', encoding='utf-8') as handle:
        return json.load(handle)


def plan_snapshot(snapshot_path, period_floors, split, alpha, beta, rate_max, rate_min, amount):
    entries = load_snapshot(snapshot_path)
    rows = [(entry["rate"], entry["period"], entry["amount"]) for entry in entries]
    stats = aggregate_period_stats(rows, period_floors.keys())
    planner = FundingOfferPlanner(split, alpha, beta, rate_max, period_floors, rate_min)
    quotes = planner.build_quotes(stats)
    return stats, quotes, planner.expand_offers(quotes, amount)


def main():
    parser = argparse.ArgumentParser(description="Print the funding offers planned for a book snapshot.")
    parser.add_argument("--snapshot", default="market_data/funding_book.json",
                        help="Path to JSON snapshot file")
    parser.add_argument("--period", default='{"2": 0.0002, "30": 0.0003, "60": 0.0004, "120": 0.0005}',
                        help="JSON5 object of period: floor rate")
    parser.add_argument("--split", type=int, default=3, help="Number of offers (default 3)")
    parser.add_argument("--alpha", type=float, default=0.5, help="Score weight of the rate / floor ratio")
    parser.add_argument("--beta", type=float, default=0.4, help="How close to the max rate to quote")
    parser.add_argument("--rate-max", type=float, default=0.01, help="Rate ceiling")
    parser.add_argument("--rate-min", type=float, default=0.0002, help="Floor for periods without one")
    parser.add_argument("--amount", type=float, default=1000, help="Total amount to split")
    args = parser.parse_args()

    period_floors = dict((int(k), float(v)) for k, v in json5.loads(args.period).items())
    try:
        stats, quotes, offers = plan_snapshot(args.snapshot, period_floors, args.split, args.alpha, args.beta,
                                              args.rate_max, max(args.rate_min, RATE_MIN), args.amount)
    except PlanningError as exc:
        print(f"Unable to plan offers: {exc}", file=sys.stderr)
        sys.exit(1)

    for period, stat in stats.items():
        print(f"{period:>4}d volume {stat.volume:14.2f} vwap {rate_stringify(stat.rate_vwap)} "
              f"max {rate_stringify(stat.rate_max)}")
    for quote in quotes:
        print(f"{quote.period:>4}d x{quote.count} @ {rate_stringify(quote.rate)}")
    print(f"{len(offers)} offers of {offers[0].amount if offers else 0} each")


if __name__ == "__main__":
    main()
