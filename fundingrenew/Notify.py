# coding=utf-8
import requests

TELEGRAM_URL = 'https://api.telegram.org/bot{0}/sendMessage'


class NotificationException(Exception):
    pass


def check_telegram_response(response, chat_id):
    try:
        data = response.json()
    except ValueError:
        data = {}
    if response.status_code != 200 or not data.get('ok', False):
        description = data.get('description', response.text)
        raise NotificationException("Telegram rejected message for chat {0}: {1}".format(chat_id, description))


def post_to_telegram(msg, chat_ids, bot_id):
    for chat_id in chat_ids:
        try:
            response = requests.post(TELEGRAM_URL.format(bot_id),
                                     data={'chat_id': chat_id, 'text': msg},
                                     timeout=30)
        except requests.RequestException as ex:
            raise NotificationException("Failed to reach Telegram: {0}".format(ex))
        check_telegram_response(response, chat_id)


def send_notification(msg, notify_conf):
    nc = notify_conf
    if nc.get('telegram'):
        post_to_telegram(msg, nc['telegram_chat_ids'], nc['telegram_bot_id'])
