import os
import shutil
import tempfile

import pytest

# Allow importing project modules when running tests directly
import sys
import inspect
currentdir = os.path.dirname(os.path.abspath(inspect.getfile(inspect.currentframe())))
parentdir = os.path.dirname(currentdir)
if parentdir not in sys.path:
    sys.path.insert(0, parentdir)

from fundingrenew import Configuration as Config

ENV_NAMES = ['INPUT_AMOUNT', 'INPUT_CURRENCY', 'INPUT_PERIOD', 'INPUT_RATE_MAX', 'INPUT_RATE_MIN', 'INPUT_SPLIT',
             'INPUT_ALPHA', 'INPUT_BETA', 'INPUT_MIN_LOAN_SIZE', 'BITFINEX_API_KEY', 'BITFINEX_API_SECRET', 'TELEGRAM_TOKEN',
             'TELEGRAM_CHAT_ID']


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_cfg():
    tmp_dir = tempfile.mkdtemp()

    def _write(content):
        path = os.path.join(tmp_dir, 'default.cfg')
        with open(path, 'w') as handle:
            handle.write(content)
        Config.init(path)
        return path
    try:
        yield _write
    finally:
        shutil.rmtree(tmp_dir)


def test_env_name_converts_camel_case():
    assert Config.env_name('rateMax') == 'INPUT_RATE_MAX'
    assert Config.env_name('split') == 'INPUT_SPLIT'


def test_defaults_without_config_file():
    Config.init(None)
    cfg = Config.get_funding_config()
    assert cfg.currency == 'USD'
    assert cfg.amount == 0
    assert cfg.split == 3
    assert cfg.alpha == 0.5
    assert cfg.beta == 0.4
    assert cfg.rate_max == 0.01
    assert cfg.rate_min == 0.0002
    assert cfg.period_floors == {2: 0.0002, 30: 0.0002, 60: 0.0002, 120: 0.0002}


def test_reads_funding_section(write_cfg):
    write_cfg("[FUNDING]\n"
              "currency = ust\n"
              "amount = 500\n"
              'period = {"2": 0.00025, "30": 0.0004}\n'
              "split = 4\n"
              "alpha = 1.5\n"
              "beta = 0.2\n"
              "rateMax = 0.005\n")
    cfg = Config.get_funding_config()
    assert cfg.currency == 'UST'
    assert cfg.amount == 500
    assert cfg.period_floors == {2: 0.00025, 30: 0.0004}
    assert cfg.split == 4
    assert cfg.alpha == 1.5
    assert cfg.beta == 0.2
    assert cfg.rate_max == 0.005


def test_environment_overrides_config_file(write_cfg, monkeypatch):
    write_cfg("[FUNDING]\nsplit = 4\nrateMax = 0.005\n")
    monkeypatch.setenv('INPUT_SPLIT', '7')
    monkeypatch.setenv('INPUT_RATE_MAX', '0.002')
    monkeypatch.setenv('INPUT_PERIOD', '{"60": 0.0003}')
    cfg = Config.get_funding_config()
    assert cfg.split == 7
    assert cfg.rate_max == 0.002
    assert cfg.period_floors == {60: 0.0003}


def test_period_accepts_json5(write_cfg, monkeypatch):
    write_cfg("[FUNDING]\ncurrency = usd\n")
    monkeypatch.setenv('INPUT_PERIOD', "{'2': 0.0002, \"30\": 0.0003, /* long */ }")
    assert Config.get_funding_config().period_floors == {2: 0.0002, 30: 0.0003}


def test_min_loan_size_default_depends_on_currency(write_cfg, monkeypatch):
    write_cfg("[FUNDING]\ncurrency = usd\n")
    assert Config.get_funding_config().min_loan_size == 150
    monkeypatch.setenv('INPUT_CURRENCY', 'btc')
    assert Config.get_funding_config().min_loan_size == 0
    monkeypatch.setenv('INPUT_MIN_LOAN_SIZE', '0.01')
    assert Config.get_funding_config().min_loan_size == 0.01


def test_empty_environment_value_is_ignored(write_cfg, monkeypatch):
    write_cfg("[FUNDING]\nsplit = 4\n")
    monkeypatch.setenv('INPUT_SPLIT', '')
    assert Config.get_funding_config().split == 4


def test_out_of_range_values_are_clamped(write_cfg):
    write_cfg("[FUNDING]\nsplit = 50\nbeta = 1.5\nrateMin = 0.00001\n")
    cfg = Config.get_funding_config()
    assert cfg.split == 20
    assert cfg.beta == 1
    assert cfg.rate_min == 0.0001


@pytest.mark.parametrize("option, value", [
    ('beta', '0'),
    ('alpha', '-1'),
    ('period', 'not json'),
    ('period', '[2, 30]'),
    ('period', '{"1": 0.0002}'),
    ('period', '{"30": 0}'),
])
def test_invalid_values_raise(write_cfg, option, value):
    write_cfg("[FUNDING]\n{0} = {1}\n".format(option, value))
    with pytest.raises(ValueError):
        Config.get_funding_config()


def test_missing_required_option_exits():
    Config.init(None)
    with pytest.raises(SystemExit):
        Config.get('FUNDING', 'currency', None)


def test_api_credentials_prefer_environment(write_cfg, monkeypatch):
    write_cfg("[API]\napikey = file-key\nsecret = file-secret\n")
    assert Config.get_api_credentials() == ('file-key', 'file-secret')
    monkeypatch.setenv('BITFINEX_API_KEY', 'env-key')
    assert Config.get_api_credentials() == ('env-key', 'file-secret')


def test_notification_config(write_cfg, monkeypatch):
    write_cfg("[notifications]\nnotify_summary = false\n")
    notify_conf = Config.get_notification_config()
    assert notify_conf['telegram'] is False
    assert notify_conf['notify_summary'] is False
    monkeypatch.setenv('TELEGRAM_TOKEN', '123:abc')
    monkeypatch.setenv('TELEGRAM_CHAT_ID', '1, 2')
    notify_conf = Config.get_notification_config()
    assert notify_conf['telegram'] is True
    assert notify_conf['telegram_chat_ids'] == ['1', '2']
