# coding=utf-8
import hashlib
import hmac
import json
import time
from decimal import Decimal

import requests

from fundingrenew.ExchangeApi import ExchangeApi, ApiError

PUBLIC_URL = "https://api-pub.bitfinex.com"
AUTH_URL = "https://api.bitfinex.com"


class Bitfinex(ExchangeApi):
    def __init__(self, cfg, log, session=None):
        super(Bitfinex, self).__init__(cfg, log)
        self.APIKey, self.Secret = cfg.get_api_credentials()
        self.session = session or requests.Session()
        self.timeout = 30
        self.req_period = 150  # milliseconds between two requests
        self.req_time_log = 0

    def limit_request_rate(self):
        now = time.time() * 1000
        wait = self.req_time_log + self.req_period - now
        if wait > 0:
            time.sleep(wait / 1000.0)
        self.req_time_log = time.time() * 1000

    @staticmethod
    def _nonce():
        return str(int(time.time() * 1000000))

    def _sign_payload(self, path, nonce, body):
        signature = '/api/{0}{1}{2}'.format(path, nonce, body)
        return hmac.new(self.Secret.encode('utf-8'), signature.encode('utf-8'), hashlib.sha384).hexdigest()

    def _auth_headers(self, path, body):
        nonce = self._nonce()
        return {
            'bfx-nonce': nonce,
            'bfx-apikey': self.APIKey,
            'bfx-signature': self._sign_payload(path, nonce, body),
            'content-type': 'application/json'
        }

    @staticmethod
    def _parse_response(response):
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, list) and len(data) >= 3 and data[0] == 'error':
            raise ApiError("Bitfinex error {0}: {1}".format(data[1], data[2]))
        try:
            response.raise_for_status()
        except requests.HTTPError as ex:
            raise ApiError("Bitfinex HTTP error: {0}".format(ex))
        return data

    def _public_get(self, path, params=None):
        self.limit_request_rate()
        url = '{0}/{1}'.format(PUBLIC_URL, path)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as ex:
            raise ApiError("Request to {0} failed: {1}".format(url, ex))
        return self._parse_response(response)

    def _private_post(self, path, payload=None):
        if not self.APIKey or not self.Secret:
            raise ApiError("Bitfinex API key and secret are required for {0}".format(path))
        self.limit_request_rate()
        body = json.dumps(payload or {})
        url = '{0}/{1}'.format(AUTH_URL, path)
        try:
            response = self.session.post(url, data=body, headers=self._auth_headers(path, body), timeout=self.timeout)
        except requests.RequestException as ex:
            raise ApiError("Request to {0} failed: {1}".format(url, ex))
        return self._parse_response(response)

    @staticmethod
    def _symbol(currency):
        return 'f{0}'.format(currency.upper())

    def return_platform_status(self):
        status = self._public_get('v2/platform/status')
        return bool(status) and int(status[0]) == 1

    def return_funding_stats(self, currency):
        rows = self._public_get('v2/funding/stats/{0}/hist'.format(self._symbol(currency)), {'limit': 1})
        if not rows:
            return None
        entry = rows[0]
        return {'mts': int(entry[0]), 'frr': float(entry[3] or 0), 'avg_period': entry[4]}

    def return_funding_book(self, currency, limit):
        rows = self._public_get('v2/book/{0}/P0'.format(self._symbol(currency)), {'len': limit})
        book = []
        for entry in rows or []:
            # [RATE, PERIOD, COUNT, AMOUNT]
            if len(entry) < 4:
                continue
            book.append((float(entry[0]), int(entry[1]), float(entry[3])))
        return book

    def return_auto_renew_status(self, currency):
        status = self._private_post('v2/auth/r/funding/auto/status', {'currency': currency.upper()})
        if not status:
            return None
        return {
            'currency': status[0],
            'period': status[1],
            'rate': float(status[2] or 0),
            'amount': float(status[3] or 0)
        }

    def set_auto_renew(self, currency, status):
        return self._private_post('v2/auth/w/funding/auto', {'currency': currency.upper(), 'status': int(status)})

    def cancel_all_funding_offers(self, currency):
        msg = self._private_post('v2/auth/w/funding/offer/cancel/all', {'currency': currency.upper()})
        return self._notification_to_dict(msg)

    def create_funding_offer(self, currency, amount, rate, period):
        payload = {
            'type': 'LIMIT',
            'symbol': self._symbol(currency),
            'amount': str(amount),
            'rate': str(rate),
            'period': int(period),
            'flags': 0
        }
        msg = self._notification_to_dict(self._private_post('v2/auth/w/funding/offer/submit', payload))
        if not msg['success']:
            raise ApiError(msg['message'])
        return msg

    def return_funding_offers(self, currency):
        rows = self._private_post('v2/auth/r/funding/offers/{0}'.format(self._symbol(currency)))
        offers = []
        for entry in rows or []:
            offers.append({
                'id': entry[0],
                'amount': Decimal(str(entry[4])),
                'rate': float(entry[14]),
                'period': int(entry[15])
            })
        return offers

    def return_available_funding_balance(self, currency):
        for wallet in self._private_post('v2/auth/r/wallets') or []:
            # [WALLET_TYPE, CURRENCY, BALANCE, UNSETTLED_INTEREST, AVAILABLE_BALANCE, ...]
            if wallet[0] == 'funding' and wallet[1] == currency.upper():
                available = wallet[4] if len(wallet) > 4 and wallet[4] is not None else wallet[2]
                return Decimal(str(available))
        return Decimal('0')

    @staticmethod
    def _notification_to_dict(msg):
        # [MTS, TYPE, MESSAGE_ID, null, DATA, CODE, STATUS, TEXT]
        if not isinstance(msg, list) or len(msg) < 8:
            return {'success': bool(msg), 'message': str(msg), 'orderId': None}
        data = msg[4]
        order_id = data[0] if isinstance(data, list) and data and not isinstance(data[0], list) else None
        return {'success': msg[6] == 'SUCCESS', 'message': msg[7], 'orderId': order_id}
