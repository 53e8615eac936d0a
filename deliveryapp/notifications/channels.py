from enum import Enum


class Channel(str, Enum):
    SOUND_ONCE = "sound_once"
    SOUND_LOOP = "sound_loop"
    SOUND_STOP = "sound_stop"
    TOAST = "toast"
    UNREAD_COUNTER = "unread_counter"
