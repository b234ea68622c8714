from typing import Callable, Optional

HoverListener = Callable[[Optional[int]], None]


class HoverBridge:
    """Relays hovered source references to one external listener.

    The listener slot is read when an event is dispatched, never captured earlier, so a host
    replacing its listener can not receive events on the old one. Events are delivered once,
    synchronously.
    """

    def __init__(self, listener: Optional[HoverListener] = None):
        self.listener = listener

    def set_listener(self, listener: Optional[HoverListener]):
        self.listener = listener

    def enter(self, source_ref: int):
        self._dispatch(source_ref)

    def leave(self):
        self._dispatch(None)

    def _dispatch(self, source_ref: Optional[int]):
        listener = self.listener
        if listener is not None:
            listener(source_ref)
