from threading import Lock

from sensors import Sample

DEFAULT_HISTORY_SIZE = 300


class HistoryRing:
    """Fixed-capacity circular buffer of samples.

    Slots start out as zero samples, so a snapshot always has ``capacity``
    entries. Stored humidity is always within [0, 100]. ``push`` and
    ``snapshot`` share one lock; a snapshot is a fresh list ordered oldest to
    newest.
    """

    def __init__(self, capacity=DEFAULT_HISTORY_SIZE):
        if capacity < 1:
            raise ValueError(f"history capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._slots = [Sample()] * capacity
        self._next_index = 0
        self._lock = Lock()

    def __len__(self):
        return self.capacity

    def push(self, sample):
        if sample.valid:
            sample = sample.clamped()
        with self._lock:
            self._slots[self._next_index] = sample
            self._next_index = (self._next_index + 1) % self.capacity

    def snapshot(self):
        with self._lock:
            start = self._next_index
            return self._slots[start:] + self._slots[:start]

    def latest(self):
        with self._lock:
            return self._slots[self._next_index - 1]
