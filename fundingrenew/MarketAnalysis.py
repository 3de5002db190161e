from collections import Counter, namedtuple
from decimal import Decimal, ROUND_DOWN

import numpy
import pandas as pd

RATE_MIN = 0.0001  # APR 3.65%
MIN_SPLIT = 1
MAX_SPLIT = 20
MIN_PERIOD = 2
MAX_PERIOD = 120
ROW_COLUMNS = ['rate', 'period', 'amount']

PeriodStat = namedtuple('PeriodStat', ['period', 'volume', 'rate_vwap', 'rate_max'])
AllocationEntry = namedtuple('AllocationEntry', ['period', 'count'])
OfferQuote = namedtuple('OfferQuote', ['period', 'rate', 'count'])
Offer = namedtuple('Offer', ['period', 'rate', 'amount'])


class PlanningError(Exception):
    pass


class EmptyMarketError(PlanningError):
    pass


class InvalidBoundsError(PlanningError):
    pass


def zero_stat(period):
    return PeriodStat(period, 0.0, 0.0, 0.0)


def _build_frame(rows):
    entries = []
    for row in rows or []:
        try:
            if len(row) < 3:
                continue
            entries.append(tuple(row[:3]))
        except TypeError:
            continue
    frame = pd.DataFrame(entries, columns=ROW_COLUMNS)
    for column in ROW_COLUMNS:
        frame[column] = pd.to_numeric(frame[column], errors='coerce')
    frame = frame.dropna()
    # periods are whole days
    frame = frame[frame['period'] % 1 == 0]
    return frame.astype({'rate': float, 'period': int, 'amount': float})


def aggregate_period_stats(rows, periods):
    """
    Reduce an order-book snapshot to one PeriodStat per period of interest.

    :param rows: Iterable of (rate, period, amount) rows, amount sign is ignored
    :param periods: The periods to keep, rows for any other period are dropped

    :return: A dict of period -> PeriodStat, in the iteration order of periods. Periods without rows get a zero stat.
    """
    periods = [int(p) for p in periods]
    frame = _build_frame(rows)
    frame = frame[frame['period'].isin(periods)].copy()
    frame['amount'] = frame['amount'].abs()
    frame['weighted'] = frame['rate'] * frame['amount']
    grouped = frame.groupby('period').agg(volume=('amount', 'sum'),
                                          rate_sum=('weighted', 'sum'),
                                          rate_max=('rate', 'max'))
    stats = {}
    for period in periods:
        if period not in grouped.index:
            stats[period] = zero_stat(period)
            continue
        entry = grouped.loc[period]
        volume = float(entry['volume'])
        rate_vwap = float(entry['rate_sum']) / volume if volume > 0 else 0.0
        stats[period] = PeriodStat(period, volume, rate_vwap, max(float(entry['rate_max']), 0.0))
    return stats


def resolve_floor(period_floors, period, default_floor=RATE_MIN):
    """Returns the minimum acceptable rate for period, falling back to default_floor"""
    if period_floors and period in period_floors:
        return float(period_floors[period])
    return float(default_floor)


def score_periods(stats, period_floors, alpha, default_floor=RATE_MIN):
    """
    Attractiveness of each period: (max(vwap, floor) / floor) ** alpha * ln(1 + volume).

    :return: A list of (period, score) in the iteration order of stats
    """
    periods = list(stats)
    floors = numpy.array([resolve_floor(period_floors, p, default_floor) for p in periods], dtype=float)
    vwaps = numpy.array([stats[p].rate_vwap for p in periods], dtype=float)
    volumes = numpy.array([stats[p].volume for p in periods], dtype=float)
    ratios = numpy.maximum(vwaps, floors) / floors
    scores = numpy.power(ratios, float(alpha)) * numpy.log1p(volumes)
    return [(period, float(score)) for period, score in zip(periods, scores)]


def rank_periods(stats, period_floors, alpha, default_floor=RATE_MIN):
    scored = score_periods(stats, period_floors, alpha, default_floor)
    # stable sort keeps the input order for equal scores
    order = numpy.argsort([-score for _, score in scored], kind='stable')
    return [scored[i][0] for i in order]


def plan_offers(stats, split, period_floors, alpha, default_floor=RATE_MIN):
    """
    Distribute split offer slots over the periods in stats, best score first, round-robin.

    :param stats: dict of period -> PeriodStat
    :param split: Total number of offer slots
    :param period_floors: dict of period -> floor rate
    :param alpha: Sensitivity of the score to the rate / floor ratio

    :return: A list of AllocationEntry in ranked order, counts summing to split
    """
    if not stats:
        raise EmptyMarketError("Funding book is empty, no periods to rank")
    split = int(split)
    if split < MIN_SPLIT or split > MAX_SPLIT:
        raise ValueError("split must be between {0} and {1}, got {2}".format(MIN_SPLIT, MAX_SPLIT, split))
    ranked = rank_periods(stats, period_floors, alpha, default_floor)
    counts = Counter(ranked[i % len(ranked)] for i in range(split))
    return [AllocationEntry(period, counts[period]) for period in ranked if counts[period] > 0]


def quote_rate(stat, period, period_floors, beta, cap, default_floor=RATE_MIN):
    """
    Rate for every offer at period: blends max(vwap, floor) towards the observed max rate by beta, then clamps the
    result to [floor, cap].
    """
    floor = resolve_floor(period_floors, period, default_floor)
    cap = float(cap)
    if floor > cap:
        raise InvalidBoundsError("Floor {0} for {1}d is above the rate ceiling {2}".format(floor, period, cap))
    beta = float(beta)
    if not 0 < beta <= 1:
        raise ValueError("beta must be in (0, 1], got {0}".format(beta))
    base = max(stat.rate_vwap, floor)
    raw = base + beta * (stat.rate_max - base)
    return min(max(raw, floor), cap)


def rate_to_period(period_floors, rate_target):
    """
    Longest period whose floor is reached by rate_target, 2 days if none is.

    Public helper for callers holding a raw period map, so keys may be strings as parsed from JSON.
    """
    floors = sorted(((int(k), float(v)) for k, v in period_floors.items()), reverse=True)
    found = MIN_PERIOD
    for period, floor in floors:
        if float(rate_target) >= floor:
            found = period
            break
    return min(max(found, MIN_PERIOD), MAX_PERIOD)


class FundingOfferPlanner(object):
    def __init__(self, split, alpha, beta, rate_cap, period_floors=None, default_floor=RATE_MIN):
        self.split = int(split)
        self.alpha = float(alpha)
        self.beta = float(beta)
        self.rate_cap = float(rate_cap)
        self.period_floors = dict(period_floors or {})
        self.default_floor = float(default_floor)

    @staticmethod
    def _quantize_amount(amount):
        return Decimal(amount).quantize(Decimal('0.01'), rounding=ROUND_DOWN)

    def build_quotes(self, stats):
        """
        Plans the allocation and quotes one rate per allocated period. Either every quote is returned or an error is
        raised, there is no partial plan.
        """
        plan = plan_offers(stats, self.split, self.period_floors, self.alpha, self.default_floor)
        quotes = []
        for entry in plan:
            rate = quote_rate(stats[entry.period], entry.period, self.period_floors, self.beta, self.rate_cap,
                              self.default_floor)
            quotes.append(OfferQuote(entry.period, rate, entry.count))
        return quotes

    def expand_offers(self, quotes, total_amount):
        amount_each = self._quantize_amount(Decimal(str(total_amount)) / self.split)
        offers = []
        for quote in quotes:
            for _ in range(quote.count):
                offers.append(Offer(quote.period, quote.rate, amount_each))
        return offers
