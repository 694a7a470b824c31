import pytest

from sensors import I2C_ERROR, Sample, TransportInitError


class ScriptedSource:
    """Sample source that replays a fixed script of readings.

    ``None`` entries in the script are failed reads.
    """

    def __init__(self, readings=(), fail_open=False, repeat_last=False):
        self.readings = list(readings)
        self.fail_open = fail_open
        self.repeat_last = repeat_last
        self.last_error = None
        self.opened = False
        self.closed = False
        self.reads = 0

    def open(self):
        if self.fail_open:
            self.last_error = I2C_ERROR
            raise TransportInitError(I2C_ERROR)
        self.opened = True

    def read_sample(self):
        self.reads += 1
        if self.readings:
            reading = self.readings[0] if self.repeat_last and len(self.readings) == 1 else self.readings.pop(0)
        else:
            reading = None
        if reading is None:
            self.last_error = "read failed"
            return Sample.invalid()
        self.last_error = None
        return Sample(*reading)

    def close(self):
        self.closed = True


@pytest.fixture
def scripted_source():
    return ScriptedSource
