import hashlib
import hmac
import json
from decimal import Decimal

import pytest
import requests

# Allow importing project modules when running tests directly
import os
import sys
import inspect
currentdir = os.path.dirname(os.path.abspath(inspect.getfile(inspect.currentframe())))
parentdir = os.path.dirname(currentdir)
if parentdir not in sys.path:
    sys.path.insert(0, parentdir)

from fundingrenew.Bitfinex import Bitfinex
from fundingrenew.ExchangeApi import ApiError


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("{0} Error".format(self.status_code))


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append(('GET', url, params, None, None))
        return self.responses.pop(0)

    def post(self, url, data=None, headers=None, timeout=None):
        self.requests.append(('POST', url, None, data, headers))
        return self.responses.pop(0)


class DummyCfg:
    def __init__(self, key='key', secret='secret'):
        self.key = key
        self.secret = secret

    def get_api_credentials(self):
        return self.key, self.secret


def make_api(responses, cfg=None):
    session = FakeSession(responses)
    api = Bitfinex(cfg or DummyCfg(), log=None, session=session)
    api.req_period = 0
    return api, session


def test_funding_book_rows_are_rate_period_amount():
    api, session = make_api([FakeResponse([[0.0002, 2, 3, 1500.5], [0.00031, 30, 1, -200], [0.1]])])
    book = api.return_funding_book('usd', 100)
    assert book == [(0.0002, 2, 1500.5), (0.00031, 30, -200.0)]
    method, url, params, _, _ = session.requests[0]
    assert url == 'https://api-pub.bitfinex.com/v2/book/fUSD/P0'
    assert params == {'len': 100}


def test_platform_status():
    api, _ = make_api([FakeResponse([1]), FakeResponse([0])])
    assert api.return_platform_status() is True
    assert api.return_platform_status() is False


def test_funding_stats_reads_frr():
    api, _ = make_api([FakeResponse([[1700000000000, None, None, 0.00025, 30, None, None, 1000, 900]])])
    stats = api.return_funding_stats('USD')
    assert stats['mts'] == 1700000000000
    assert stats['frr'] == pytest.approx(0.00025)


def test_private_requests_are_signed():
    api, session = make_api([FakeResponse([[0, 'CANCEL_ALL', None, None, None, None, 'SUCCESS', 'Cancelled']])])
    msg = api.cancel_all_funding_offers('usd')
    assert msg['success'] is True
    _, url, _, body, headers = session.requests[0]
    assert url == 'https://api.bitfinex.com/v2/auth/w/funding/offer/cancel/all'
    assert json.loads(body) == {'currency': 'USD'}
    payload = '/api/v2/auth/w/funding/offer/cancel/all' + headers['bfx-nonce'] + body
    expected = hmac.new(b'secret', payload.encode('utf-8'), hashlib.sha384).hexdigest()
    assert headers['bfx-signature'] == expected
    assert headers['bfx-apikey'] == 'key'


def test_private_requests_need_credentials():
    api, session = make_api([], cfg=DummyCfg('', ''))
    with pytest.raises(ApiError):
        api.return_funding_offers('USD')
    assert session.requests == []


def test_create_funding_offer_returns_order_id():
    offer = [123, 'fUSD', 0, 0, 150, 150, 'LIMIT', None, None, 0, 'ACTIVE', None, None, None, 0.0003, 2]
    api, session = make_api([FakeResponse([0, 'fon-req', None, None, offer, None, 'SUCCESS', 'Submitted'])])
    msg = api.create_funding_offer('USD', '150.00', '0.00030000', 2)
    assert msg == {'success': True, 'message': 'Submitted', 'orderId': 123}
    body = json.loads(session.requests[0][3])
    assert body == {'type': 'LIMIT', 'symbol': 'fUSD', 'amount': '150.00', 'rate': '0.00030000', 'period': 2,
                    'flags': 0}


def test_create_funding_offer_raises_on_error_status():
    api, _ = make_api([FakeResponse([0, 'fon-req', None, None, [], None, 'ERROR', 'Invalid offer: rate too low'])])
    with pytest.raises(ApiError):
        api.create_funding_offer('USD', '150.00', '0.00000001', 2)


def test_error_payload_raises_api_error():
    api, _ = make_api([FakeResponse(['error', 10100, 'apikey: invalid'], status_code=500)])
    with pytest.raises(ApiError) as excinfo:
        api.return_funding_offers('USD')
    assert 'apikey: invalid' in str(excinfo.value)


def test_http_error_raises_api_error():
    api, _ = make_api([FakeResponse(None, status_code=503)])
    with pytest.raises(ApiError):
        api.return_platform_status()


def test_funding_offers_and_wallet_balance():
    offer = [7, 'fUSD', 0, 0, 150.5, 150.5, 'LIMIT', None, None, 0, 'ACTIVE', None, None, None, 0.0003, 30]
    wallets = [['exchange', 'USD', 10, 0, 10], ['funding', 'USD', 900, 0, 750.25], ['funding', 'BTC', 1, 0, None]]
    api, _ = make_api([FakeResponse([offer]), FakeResponse(wallets), FakeResponse(wallets)])
    offers = api.return_funding_offers('USD')
    assert offers == [{'id': 7, 'amount': Decimal('150.5'), 'rate': 0.0003, 'period': 30}]
    assert api.return_available_funding_balance('USD') == Decimal('750.25')
    assert api.return_available_funding_balance('BTC') == Decimal('1')


def test_auto_renew_status():
    api, _ = make_api([FakeResponse(None), FakeResponse(['USD', 2, 0.0003, 0])])
    assert api.return_auto_renew_status('USD') is None
    status = api.return_auto_renew_status('USD')
    assert status == {'currency': 'USD', 'period': 2, 'rate': 0.0003, 'amount': 0.0}
