# coding=utf-8
import time
from decimal import Decimal

from fundingrenew.MarketAnalysis import FundingOfferPlanner, EmptyMarketError, aggregate_period_stats, rate_to_period

api = None
log = None
Data = None
funding_cfg = None
planner = None
notify_conf = {}
dry_run = False

OFFER_SUBMIT_DELAY = 0.12  # seconds between two offers, keeps us under the rate limit
OFFER_SETTLE_DELAY = 1
NOTIFY_TITLE = 'funding-auto-renew'


def init(cfg, api1, log1, data, notify_conf1, dry_run1=False):
    global api, log, Data, funding_cfg, planner, notify_conf, dry_run
    api = api1
    log = log1
    Data = data
    notify_conf = notify_conf1 or {}
    dry_run = dry_run1
    funding_cfg = cfg.get_funding_config()
    planner = FundingOfferPlanner(funding_cfg.split, funding_cfg.alpha, funding_cfg.beta, funding_cfg.rate_max,
                                  funding_cfg.period_floors, funding_cfg.rate_min)
    log.log("Funding input: currency={0}, amount={1}, split={2}, alpha={3}, beta={4}, rateMin={5}, rateMax={6}"
            .format(funding_cfg.currency, funding_cfg.amount, funding_cfg.split, funding_cfg.alpha, funding_cfg.beta,
                    Data.rate_stringify(funding_cfg.rate_min), Data.rate_stringify(funding_cfg.rate_max)))
    log.log("Funding periods: {0}".format(", ".join(
        "{0}d >= {1}".format(period, Data.rate_stringify(floor))
        for period, floor in sorted(funding_cfg.period_floors.items()))))


def log_funding_stats(currency):
    stats = api.return_funding_stats(currency)
    if not stats:
        log.log("No funding stats available for {0}".format(currency))
        return
    log.log("Funding stats {0} @ {1}: FRR {2} reaches floors up to {3}d".format(
        currency, Data.date_stringify(stats['mts']), Data.rate_stringify(stats['frr']),
        rate_to_period(funding_cfg.period_floors, stats['frr'])))


def build_quotes(currency):
    rows = api.return_funding_book(currency, funding_cfg.book_length)
    stats = aggregate_period_stats(rows, funding_cfg.period_floors.keys())
    for period, stat in stats.items():
        log.log("{0}d book: volume {1:.2f}, vwap {2}, max {3}".format(
            period, stat.volume, Data.rate_stringify(stat.rate_vwap), Data.rate_stringify(stat.rate_max)))
    return planner.build_quotes(stats)


def disable_auto_renew(currency):
    auto_renew = api.return_auto_renew_status(currency)
    if auto_renew is None:
        log.log("Auto-renew for {0} is off".format(currency))
        return
    log.log("Auto-renew for {0} is on: {1} for {2}d, amount {3}".format(
        currency, Data.rate_stringify(auto_renew['rate']), auto_renew['period'], auto_renew['amount']))
    if not dry_run:
        msg = api.set_auto_renew(currency, 0)
        log.log("Disabled auto-renew for {0}. {1}".format(currency, log.digestApiMsg(msg)))


def cancel_all(currency):
    if dry_run:
        return
    msg = api.cancel_all_funding_offers(currency)
    log.cancelOrder(currency, msg)


def get_total_amount(currency, include_on_order=False):
    amount = Decimal(str(funding_cfg.amount))
    if amount > 0:
        return amount
    # 0 lends the whole funding wallet
    total = Decimal(str(api.return_available_funding_balance(currency)))
    if include_on_order:
        # open offers are cancelled before a live run reads the balance
        total += Data.get_on_order_offers(currency)[1]
    return total


def is_lendable(currency, offers, total_amount):
    if not offers or offers[0].amount < Decimal(str(funding_cfg.min_loan_size)):
        log.log("Not lending {0}: {1} split {2} ways is below the min loan size {3}".format(
            currency, total_amount, funding_cfg.split, funding_cfg.min_loan_size))
        return False
    return True


def create_lend_offer(currency, offer):
    amt = "%.2f" % offer.amount
    rate = "%.8f" % offer.rate
    if dry_run:
        log.log("DRY RUN: would place {0} {1} @ {2} for {3}d".format(
            amt, currency, Data.rate_stringify(offer.rate), offer.period))
        return None
    msg = api.create_funding_offer(currency, amt, rate, offer.period)
    log.offer(amt, currency, offer.rate, offer.period, msg)
    return msg


def renew_offers():
    """
    One renewal cycle: plan offers from the current funding book, cancel the open ones and place the new ones.

    :return: The number of offers placed
    """
    currency = funding_cfg.currency
    if not api.return_platform_status():
        log.log_error("Bitfinex API in maintenance")
        return 0
    log_funding_stats(currency)

    try:
        quotes = build_quotes(currency)
    except EmptyMarketError as ex:
        log.log("Skipping {0}: {1}".format(currency, ex))
        return 0
    for quote in quotes:
        log.log("Plan {0}d: {1} offer(s) @ {2}".format(quote.period, quote.count, Data.rate_stringify(quote.rate)))

    # checked against the planned amount before touching any open offer
    total_amount = get_total_amount(currency, include_on_order=True)
    offers = planner.expand_offers(quotes, total_amount)
    if not is_lendable(currency, offers, total_amount):
        return 0

    disable_auto_renew(currency)
    cancel_all(currency)

    if not dry_run and funding_cfg.amount <= 0:
        total_amount = get_total_amount(currency)
        offers = planner.expand_offers(quotes, total_amount)
        if not is_lendable(currency, offers, total_amount):
            return 0

    order_count = 0
    for offer in offers:
        create_lend_offer(currency, offer)
        order_count += 1
        time.sleep(OFFER_SUBMIT_DELAY)

    if dry_run:
        return order_count

    time.sleep(OFFER_SETTLE_DELAY)
    open_offers, order_amount = Data.get_on_order_offers(currency)
    log.log(Data.stringify_offers(currency, open_offers))
    if notify_conf.get('notify_summary', True):
        text = "{0}:\nsplit into {1} offers, lending {2} {3}".format(NOTIFY_TITLE, order_count, order_amount, currency)
        log.notify(text, notify_conf)
    return order_count
