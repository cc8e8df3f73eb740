class EventSource:
    """
    Handlers called with whatever is fired, in the order they were added.
    Handlers may add or remove handlers while being called; the change applies from the next fire.

        source = EventSource()
        source += print
        source.fire("hello")
    """

    def __init__(self):
        self._handlers = []

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        """ removes the handler, if present """
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    __iadd__ = add
    __isub__ = remove

    def __contains__(self, handler):
        return handler in self._handlers

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        for handler in self.handlers():
            handler(*args, **kwargs)

    __call__ = fire
