from deliveryapp.notifications.channels import Channel
from deliveryapp.notifications.events import Audience, OrderTrigger


STATUS_RULES = {

    Audience.ADMIN: {
        OrderTrigger.NEW_ORDER: {
            Channel.SOUND_LOOP: True,
            Channel.TOAST: True,
            Channel.UNREAD_COUNTER: True,
        },
        # accepting the order silences the alert
        OrderTrigger.PREPARING: {
            Channel.SOUND_STOP: True,
        },
    },

    Audience.CUSTOMER: {
        OrderTrigger.PREPARING: {
            Channel.SOUND_ONCE: True,
            Channel.TOAST: True,
        },
        OrderTrigger.DELIVERING: {
            Channel.SOUND_ONCE: True,
            Channel.TOAST: True,
        },
        OrderTrigger.DELIVERED: {
            Channel.SOUND_ONCE: True,
            Channel.TOAST: True,
        },
        OrderTrigger.REJECTED: {
            Channel.SOUND_ONCE: True,
            Channel.TOAST: True,
        },
    },

}
