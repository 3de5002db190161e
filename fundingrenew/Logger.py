# coding=utf-8
import sys

from fundingrenew import Data
from fundingrenew.Notify import send_notification, NotificationException


class ConsoleOutput(object):
    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def printline(self, line):
        self.stream.write(line + '\n')
        self.stream.flush()


class Logger(object):
    def __init__(self, exchange='', output=None):
        self.exchange = exchange
        self.output = output or ConsoleOutput()

    def log(self, msg):
        log_message = "{0} {1}".format(Data.timestamp(), msg)
        self.output.printline(log_message)

    def log_error(self, msg):
        log_message = "{0} ERROR: {1}".format(Data.timestamp(), msg)
        self.output.printline(log_message)

    def offer(self, amt, cur, rate, days, msg):
        line = amt + ' ' + str(cur) + ' @ ' + Data.rate_stringify(rate) + ' for ' + str(days) + ' days'
        self.log('Placing ' + line + ' ' + self.digestApiMsg(msg))

    def cancelOrder(self, cur, msg):
        self.log('Canceling all ' + str(cur) + ' funding offers. ' + self.digestApiMsg(msg))

    def notify(self, msg, notify_conf):
        if not notify_conf:
            return
        try:
            send_notification(msg, notify_conf)
        except NotificationException as ex:
            self.log_error("Notification failed: {0}".format(ex))

    @staticmethod
    def digestApiMsg(msg):
        if msg is None:
            return ''
        if isinstance(msg, dict):
            if msg.get('message'):
                return str(msg['message'])
            if msg.get('error'):
                return str(msg['error'])
            return ''
        return str(msg)
