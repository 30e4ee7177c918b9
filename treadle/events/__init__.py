from .bus import DEFAULT_MAX_RECURSION, EventBus, Handler, subscriber_method

__all__ = ["EventBus", "Handler", "DEFAULT_MAX_RECURSION", "subscriber_method"]
