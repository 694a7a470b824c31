"""Read-only views of the latest reading and the history window.

``latest()``/``history()`` return plain dicts. The ``*_json()`` variants
render the exact wire format served over HTTP: every number printed with two
decimals, which ``json.dumps`` cannot do for floats.
"""
import json


def _fixed(value):
    return "%.2f" % value


def _fixed_list(values):
    return ",".join(_fixed(v) for v in values)


class SnapshotAPI:
    def __init__(self, ring, status_provider):
        self.ring = ring
        # callable returning the current LatestStatus
        self.status_provider = status_provider

    def latest(self):
        status = self.status_provider()
        if not status.is_ok:
            return {"error": status.error}
        return {
            "temperature": round(status.sample.temperature, 2),
            "humidity": round(status.sample.humidity, 2),
        }

    def history(self):
        samples = self.ring.snapshot()
        return {
            "temperature": [round(s.temperature, 2) for s in samples],
            "humidity": [round(s.humidity, 2) for s in samples],
        }

    def latest_json(self):
        status = self.status_provider()
        if not status.is_ok:
            return json.dumps({"error": status.error}).encode("utf-8")
        body = '{"temperature": %s, "humidity": %s}' % (
            _fixed(status.sample.temperature),
            _fixed(status.sample.humidity),
        )
        return body.encode("utf-8")

    def history_json(self):
        samples = self.ring.snapshot()
        body = '{"temperature": [%s],"humidity": [%s]}' % (
            _fixed_list(s.temperature for s in samples),
            _fixed_list(s.humidity for s in samples),
        )
        return body.encode("utf-8")
