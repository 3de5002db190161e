#!/usr/bin/env python3
"""
Runs one funding renewal cycle: cancels the open funding offers of the configured currency and places new ones split
across the most attractive lending periods of the current funding book.
"""
import argparse
import sys

from fundingrenew import Configuration as Config
from fundingrenew import Data
from fundingrenew import Lending
from fundingrenew.Bitfinex import Bitfinex
from fundingrenew.ExchangeApi import ApiError
from fundingrenew.Logger import Logger
from fundingrenew.MarketAnalysis import InvalidBoundsError


def main(argv=None):
    parser = argparse.ArgumentParser(description="Split and renew Bitfinex funding offers.")
    parser.add_argument("--config", default="default.cfg", help="Path to the config file (default default.cfg)")
    parser.add_argument("--dryrun", action="store_true", help="Plan and log offers without touching the account")
    args = parser.parse_args(argv)

    Config.init(args.config)
    log = Logger('BITFINEX')
    try:
        api = Bitfinex(Config, log)
        Data.init(api, log)
        Lending.init(Config, api, log, Data, Config.get_notification_config(), args.dryrun)
        placed = Lending.renew_offers()
    except InvalidBoundsError as ex:
        log.log_error("Invalid rate bounds, check rateMax and the period floors: {0}".format(ex))
        return 1
    except ValueError as ex:
        log.log_error("Invalid configuration: {0}".format(ex))
        return 1
    except ApiError as ex:
        log.log_error("Exchange request failed: {0}".format(ex))
        return 1
    log.log("Placed {0} funding offer(s)".format(placed))
    return 0


if __name__ == '__main__':
    sys.exit(main())
