from typing import Callable, Protocol


class AlertSound(Protocol):
    def play_once(self) -> None: ...

    def start_loop(self) -> None: ...

    def stop(self) -> None: ...


class Toaster(Protocol):
    def toast(self, title: str, description: str, variant: str = "default") -> None: ...


class PushSound:
    """Forwards sound commands to a connected client."""

    def __init__(self, push: Callable[[dict], None]):
        self.push = push
        self.looping = False

    def play_once(self):
        self.push({"type": "sound", "action": "play"})

    def start_loop(self):
        self.looping = True
        self.push({"type": "sound", "action": "loop"})

    def stop(self):
        if not self.looping:
            return
        self.looping = False
        self.push({"type": "sound", "action": "stop"})


class PushToaster:
    def __init__(self, push: Callable[[dict], None]):
        self.push = push

    def toast(self, title: str, description: str, variant: str = "default"):
        self.push({
            "type": "toast",
            "title": title,
            "description": description,
            "variant": variant,
        })
