"""
Exchange API base class, every exchange client used for funding offers has to implement these methods.
"""

import abc


class ExchangeApi(object, metaclass=abc.ABCMeta):
    def __str__(self):
        return self.__class__.__name__.upper()

    def __repr__(self):
        return self.__str__()

    def __init__(self, cfg, log):
        self.cfg = cfg
        self.log = log

    @abc.abstractmethod
    def return_platform_status(self):
        """
        Returns True when the exchange is operative, False while it is in maintenance.
        """
        pass

    @abc.abstractmethod
    def return_funding_stats(self, currency):
        """
        Returns the latest funding statistics for a currency as a dict with 'mts' and 'frr' (daily rate).
        """
        pass

    @abc.abstractmethod
    def return_funding_book(self, currency, limit):
        """
        Returns the public funding book of a currency as a list of (rate, period, amount) rows, at most limit price
        points per side.
        """
        pass

    @abc.abstractmethod
    def return_auto_renew_status(self, currency):
        """
        Returns the auto-renew settings ({'currency', 'period', 'rate', 'amount'}) or None when auto-renew is off.
        """
        pass

    @abc.abstractmethod
    def set_auto_renew(self, currency, status):
        pass

    @abc.abstractmethod
    def cancel_all_funding_offers(self, currency):
        pass

    @abc.abstractmethod
    def create_funding_offer(self, currency, amount, rate, period):
        """
        Places one lending offer and returns a dict with 'success', 'message' and 'orderId'.
        """
        pass

    @abc.abstractmethod
    def return_funding_offers(self, currency):
        """
        Returns the open funding offers of a currency as a list of dicts with 'id', 'amount', 'rate', 'period'.
        """
        pass

    @abc.abstractmethod
    def return_available_funding_balance(self, currency):
        pass


class ApiError(Exception):
    pass
