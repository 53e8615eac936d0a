import logging
from typing import Callable, List, Optional

from deliveryapp.notifications.channels import Channel
from deliveryapp.notifications.events import Audience, OrderTrigger
from deliveryapp.notifications.messages import toast_for
from deliveryapp.notifications.rules import STATUS_RULES

logger = logging.getLogger(__name__)


def _best_effort(label: str, fn, *args):
    try:
        fn(*args)
    except Exception:
        logger.exception(f"{label} failed")


def dispatch_status_effects(
    *,
    audience: Audience,
    trigger: Optional[OrderTrigger],
    order,
    sound,
    toaster,
    on_counter: Optional[Callable[[], None]] = None,
) -> List[Channel]:
    """
    Fire the UI side effects configured for a trigger.

    Sound and toast are best-effort: a failing port is logged and the
    remaining channels still fire. Returns the channels that were fired.
    """

    if trigger is None:
        return []

    rules = STATUS_RULES.get(audience, {}).get(trigger, {})
    fired = []

    # -------------------------
    # SOUND
    # -------------------------
    if rules.get(Channel.SOUND_STOP):
        _best_effort("Stopping alert sound", sound.stop)
        fired.append(Channel.SOUND_STOP)

    if rules.get(Channel.SOUND_LOOP):
        _best_effort("Starting alert sound", sound.start_loop)
        fired.append(Channel.SOUND_LOOP)

    if rules.get(Channel.SOUND_ONCE):
        _best_effort("Playing chime", sound.play_once)
        fired.append(Channel.SOUND_ONCE)

    # -------------------------
    # TOAST
    # -------------------------
    if rules.get(Channel.TOAST):
        title, description, variant = toast_for(audience, trigger, order)
        _best_effort("Showing toast", toaster.toast, title, description, variant)
        fired.append(Channel.TOAST)

    # -------------------------
    # UNREAD COUNTER
    # -------------------------
    if rules.get(Channel.UNREAD_COUNTER) and on_counter is not None:
        on_counter()
        fired.append(Channel.UNREAD_COUNTER)

    return fired
