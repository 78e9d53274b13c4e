import threading


class Sequence:
    """Monotonic counter shared by every blueprint of the factory that owns it.

    ``next()`` is safe to call from several threads. ``rewind()`` is meant for
    test isolation and must not race with ``next()``.
    """

    def __init__(self, first=1):
        self.first = first
        self._value = first
        self._started = False
        self._lock = threading.Lock()

    def __repr__(self):
        return f"<Sequence first={self.first} current={self.peek()} started={self._started}>"

    def peek(self):
        with self._lock:
            if self._value < self.first:
                return self.first
            return self._value

    def next(self):
        with self._lock:
            if self._value < self.first or (self._value == self.first and not self._started):
                self._value = self.first
                self._started = True
            else:
                self._value += 1
            return self._value

    def rewind(self):
        with self._lock:
            self._value = self.first
            self._started = False
