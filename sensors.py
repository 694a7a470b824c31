import logging
from dataclasses import dataclass, replace

HTU21D_ADDRESS = 0x40
I2C_ERROR = "I2C error"


class SensorError(Exception):
    pass


class TransportInitError(SensorError):
    """The I2C bus or the sensor on it could not be opened."""


class ReadError(SensorError):
    """A single read failed after the sensor was initialised."""


def clamp_humidity(humidity):
    return min(max(humidity, 0.0), 100.0)


@dataclass(frozen=True)
class Sample:
    temperature: float = 0.0
    humidity: float = 0.0
    valid: bool = True

    @classmethod
    def invalid(cls):
        return cls(0.0, 0.0, valid=False)

    def clamped(self):
        return replace(self, humidity=clamp_humidity(self.humidity))


class HTU21DSource:
    def __init__(self, address=HTU21D_ADDRESS):
        self.address = address
        self.last_error = None
        self._i2c = None
        self._sensor = None

    def open(self):
        try:
            import board
            import adafruit_htu21d

            self._i2c = board.I2C()
            self._sensor = adafruit_htu21d.HTU21D(self._i2c, address=self.address)
        except (NotImplementedError, OSError, RuntimeError, ValueError) as e:
            logging.error("I2C open error at 0x%02x: %s", self.address, e)
            self.last_error = I2C_ERROR
            self.close()
            raise TransportInitError(I2C_ERROR) from e
        logging.info("HTU21D opened at 0x%02x", self.address)

    def _read(self):
        if self._sensor is None:
            raise ReadError("sensor not opened")
        try:
            # temperature first, then humidity, within the same tick
            temperature = float(self._sensor.temperature)
            humidity = float(self._sensor.relative_humidity)
        except (OSError, RuntimeError) as e:
            raise ReadError(str(e)) from e
        return Sample(temperature, humidity)

    def read_sample(self):
        try:
            sample = self._read()
        except ReadError as e:
            logging.error("Sensor read error: %s", e)
            self.last_error = str(e)
            return Sample.invalid()
        self.last_error = None
        return sample

    def close(self):
        i2c, self._i2c, self._sensor = self._i2c, None, None
        if i2c is not None and hasattr(i2c, "deinit"):
            try:
                i2c.deinit()
            except (OSError, RuntimeError) as e:
                logging.warning("Error releasing I2C bus: %s", e)
