# coding=utf-8
import os
import re
from collections import namedtuple
from configparser import ConfigParser

import json5

from fundingrenew.MarketAnalysis import RATE_MIN, MIN_SPLIT, MAX_SPLIT, MIN_PERIOD, MAX_PERIOD

config = ConfigParser()
DEFAULT_PERIODS = [2, 30, 60, 120]
# Bitfinex rejects funding offers worth less than 150 USD, other currencies are left to the exchange
DEFAULT_MIN_LOAN_SIZES = {'USD': 150, 'UST': 150}

FundingConfig = namedtuple('FundingConfig', ['currency', 'amount', 'period_floors', 'rate_max', 'rate_min', 'split',
                                             'alpha', 'beta', 'book_length', 'min_loan_size'])


def init(file_location):
    config.clear()
    if file_location and os.path.exists(file_location):
        config.read(file_location)
    return config


def env_name(option):
    """'rateMax' -> 'INPUT_RATE_MAX'"""
    return 'INPUT_' + re.sub(r'(?<!^)(?=[A-Z])', '_', option).upper()


def has_option(category, option):
    return config.has_option(category, option)


def get(category, option, default_value=False, lower_limit=False, upper_limit=False, env=None):
    value = os.environ.get(env) if env else None
    if value is None or value == '':
        if not config.has_option(category, option):
            if default_value is None:
                print("ERROR: [%s]-%s is not allowed to be left empty. Please check your config." % (category, option))
                exit(1)
            return default_value
        value = config.get(category, option)
    if lower_limit is not False and float(value) < float(lower_limit):
        print("WARN: [%s]-%s's value: '%s' is below the minimum limit: %s, which will be used instead." %
              (category, option, value, lower_limit))
        value = lower_limit
    if upper_limit is not False and float(value) > float(upper_limit):
        print("WARN: [%s]-%s's value: '%s' is above the maximum limit: %s, which will be used instead." %
              (category, option, value, upper_limit))
        value = upper_limit
    return value


def getboolean(category, option, default_value=False):
    if config.has_option(category, option):
        return config.getboolean(category, option)
    return default_value


def get_api_credentials():
    api_key = get('API', 'apikey', '', env='BITFINEX_API_KEY')
    secret = get('API', 'secret', '', env='BITFINEX_API_SECRET')
    return api_key, secret


def get_period_floors(default_floor):
    raw_value = get('FUNDING', 'period', '', env=env_name('period'))
    if not raw_value or not str(raw_value).strip():
        return dict((period, default_floor) for period in DEFAULT_PERIODS)
    try:
        parsed = json5.loads(raw_value)
    except ValueError as ex:
        raise ValueError("[FUNDING]-period must be a JSON object of period: floor rate. Error: {0}".format(ex))
    if not isinstance(parsed, dict):
        raise ValueError("[FUNDING]-period must be a JSON object, got: {0}".format(raw_value))
    floors = {}
    for key, value in parsed.items():
        try:
            period = int(key)
            floor = float(value)
        except (TypeError, ValueError):
            raise ValueError("[FUNDING]-period has an invalid entry '{0}': {1}".format(key, value))
        if period < MIN_PERIOD or period > MAX_PERIOD:
            raise ValueError("[FUNDING]-period {0} must be between {1} and {2} days".format(
                period, MIN_PERIOD, MAX_PERIOD))
        if floor <= 0:
            raise ValueError("[FUNDING]-period floor for {0}d must be positive, got {1}".format(period, floor))
        floors[period] = floor
    if not floors:
        return dict((period, default_floor) for period in DEFAULT_PERIODS)
    return floors


def get_funding_config():
    currency = str(get('FUNDING', 'currency', 'USD', env=env_name('currency'))).upper()
    amount = float(get('FUNDING', 'amount', 0, 0, env=env_name('amount')))
    rate_max = float(get('FUNDING', 'rateMax', 0.01, RATE_MIN, env=env_name('rateMax')))
    rate_min = float(get('FUNDING', 'rateMin', 0.0002, RATE_MIN, env=env_name('rateMin')))
    split = int(float(get('FUNDING', 'split', 3, MIN_SPLIT, MAX_SPLIT, env=env_name('split'))))
    alpha = float(get('FUNDING', 'alpha', 0.5, env=env_name('alpha')))
    if alpha <= 0:
        raise ValueError("[FUNDING]-alpha must be positive, got {0}".format(alpha))
    beta = float(get('FUNDING', 'beta', 0.4, False, 1, env=env_name('beta')))
    if beta <= 0:
        raise ValueError("[FUNDING]-beta must be in (0, 1], got {0}".format(beta))
    book_length = int(get('FUNDING', 'bookLength', 100, 1, 250))
    min_loan_size = float(get('FUNDING', 'minLoanSize', DEFAULT_MIN_LOAN_SIZES.get(currency, 0), 0,
                              env=env_name('minLoanSize')))
    return FundingConfig(currency, amount, get_period_floors(rate_min), rate_max, rate_min, split, alpha, beta,
                         book_length, min_loan_size)


def get_notification_config():
    notify_conf = {
        'telegram': False,
        'notify_summary': getboolean('notifications', 'notify_summary', True)
    }
    bot_id = get('notifications', 'telegram_bot_id', '', env='TELEGRAM_TOKEN')
    chat_ids = get('notifications', 'telegram_chat_ids', '', env='TELEGRAM_CHAT_ID')
    if bot_id and chat_ids:
        notify_conf['telegram'] = True
        notify_conf['telegram_bot_id'] = bot_id
        notify_conf['telegram_chat_ids'] = [chat.strip() for chat in str(chat_ids).split(',') if chat.strip()]
    return notify_conf
