import datetime
from decimal import Decimal

api = None
log = None


def init(api1, log1):
    global api, log
    api = api1
    log = log1


def get_on_order_offers(currency):
    offers = api.return_funding_offers(currency)
    on_order_amount = Decimal('0')
    for offer in offers:
        on_order_amount += Decimal(str(offer['amount']))
    return [offers, Decimal(str(truncate(on_order_amount, 8)))]


def timestamp():
    '''
    Returns timestamp in UTC
    '''
    return datetime.datetime.utcnow().strftime('%Y-%m-%d %H:%M:%S')


def date_stringify(mts):
    """Formats an exchange millisecond timestamp as a UTC date string"""
    return datetime.datetime.utcfromtimestamp(int(mts) / 1000.0).strftime('%Y-%m-%d %H:%M:%S')


def rate_stringify(rate):
    """Daily rate as percent with its yearly equivalent, ex: 0.0002 -> '0.0200% (APR 7.30%)'"""
    rate = float(rate)
    return '{0:.4f}% (APR {1:.2f}%)'.format(rate * 100, rate * 36500)


def stringify_offers(currency, offers):
    lines = ["Offers:"]
    for offer in sorted(offers, key=lambda x: (x['period'], x['rate'])):
        lines.append('{0:.2f} {1} @ {2} for {3}d'.format(
            Decimal(str(offer['amount'])), currency, rate_stringify(offer['rate']), offer['period'])[:80])
    if not offers:
        lines.append('none')
    return "\n".join(lines)


def truncate(f, n):
    """Truncates/pads a float f to n decimal places without rounding"""
    # From https://stackoverflow.com/questions/783897/truncating-floats-in-python
    s = '{}'.format(f)
    if 'e' in s or 'E' in s:
        return float('{0:.{1}f}'.format(f, n))
    i, p, d = s.partition('.')
    return float('.'.join([i, (d + '0' * n)[:n]]))
