from bookstore.notifications.events import OrderEvent
from bookstore.notifications.channels import Channel


NOTIFICATION_RULES = {

    OrderEvent.ORDER_PLACED: {
        Channel.EMAIL_USER: True,
        Channel.EMAIL_ADMIN: True,
    },

    OrderEvent.PROMOTION_ANNOUNCED: {
        Channel.EMAIL_USER: True,
    },

}
