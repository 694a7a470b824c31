import logging
import math
import threading
from dataclasses import dataclass
from typing import Optional

from sensors import I2C_ERROR, Sample, TransportInitError

NO_DATA = "No data"

STARTING = "starting"
RUNNING = "running"
DEGRADED = "degraded"
STOPPED = "stopped"


@dataclass(frozen=True)
class LatestStatus:
    """Most recent good sample, or an error message. Never both."""

    sample: Optional[Sample] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, sample):
        return cls(sample=sample)

    @classmethod
    def failed(cls, message):
        return cls(error=message)

    @property
    def is_ok(self):
        return self.sample is not None


class AcquisitionLoop:
    """Polls a sample source on a fixed interval and records good samples.

    This is the only writer of the history ring and the latest status. A
    source that cannot be opened leaves the loop degraded for good, with a
    sticky ``I2C error`` status.
    """

    def __init__(self, source, ring, interval=1.0):
        self.source = source
        self.ring = ring
        self.interval = interval
        self.state = STARTING
        self.ticks = 0
        self.skipped = 0
        self._status = LatestStatus.failed(NO_DATA)
        self._status_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def status(self) -> LatestStatus:
        with self._status_lock:
            return self._status

    def _set_status(self, status: LatestStatus) -> None:
        with self._status_lock:
            self._status = status

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="acquisition", daemon=True)
        self._thread.start()

    def open_source(self) -> bool:
        try:
            self.source.open()
        except TransportInitError as e:
            logging.error("Sensor unavailable, acquisition stopped: %s", e)
            self._degrade()
            return False
        except Exception as e:
            logging.exception("Sensor initialisation failed, acquisition stopped: %s", e)
            self._degrade()
            return False
        self.state = RUNNING
        return True

    def _degrade(self) -> None:
        self.state = DEGRADED
        self._set_status(LatestStatus.failed(I2C_ERROR))

    def tick(self) -> bool:
        """Read one sample; record it if valid. Returns whether it was recorded."""
        self.ticks += 1
        sample = self.source.read_sample()
        if not sample.valid:
            self.skipped += 1
            logging.error(
                "Skipping tick %d: %s", self.ticks, getattr(self.source, "last_error", None) or "invalid sample"
            )
            return False
        if not (math.isfinite(sample.temperature) and math.isfinite(sample.humidity)):
            self.skipped += 1
            logging.error("Skipping tick %d: non-finite reading %r", self.ticks, sample)
            return False

        stored = sample.clamped()
        if stored.humidity != sample.humidity:
            logging.debug("Humidity %.2f clamped to %.2f", sample.humidity, stored.humidity)
        self._set_status(LatestStatus.ok(stored))
        self.ring.push(stored)
        return True

    def run(self) -> None:
        if not self.open_source():
            return
        logging.info("Acquisition running every %.2fs", self.interval)
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logging.exception("Sensor error: %s", e)
            self._stop_event.wait(self.interval)

    def stop(self, timeout=5.0) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
            if self._thread.is_alive():
                logging.warning("Acquisition thread did not stop within %.1fs", timeout)
            else:
                # a stopped loop can be started again
                self._thread = None
        self.source.close()
        if self.state != DEGRADED:
            self.state = STOPPED
