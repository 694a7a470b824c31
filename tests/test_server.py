import json
import threading
import urllib.request

import pytest

from acquisition import LatestStatus
from history import HistoryRing
from sensors import Sample
from server import WebServer
from snapshot import SnapshotAPI

PAGE = b"<!DOCTYPE html><html><body>HTU21D</body></html>"


@pytest.fixture
def ring():
    return HistoryRing(4)


@pytest.fixture
def status():
    return {"current": LatestStatus.failed("No data")}


@pytest.fixture
def base_url(tmp_path, ring, status):
    page = tmp_path / "index.html"
    page.write_bytes(PAGE)
    api = SnapshotAPI(ring, lambda: status["current"])
    httpd = WebServer(api, page).create_server("127.0.0.1", 0)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield "http://127.0.0.1:%d" % httpd.server_address[1]
    httpd.shutdown()
    httpd.server_close()
    thread.join(timeout=5)


def get(url):
    with urllib.request.urlopen(url, timeout=5) as response:
        return response.status, response.headers["Content-Type"], response.read()


def test_data_reports_error_until_first_reading(base_url):
    code, content_type, body = get(base_url + "/data")
    assert code == 200
    assert content_type == "application/json"
    assert body == b'{"error": "No data"}'


def test_data_returns_latest_reading(base_url, status):
    status["current"] = LatestStatus.ok(Sample(20.0, 50.5))
    _, _, body = get(base_url + "/data")
    assert body == b'{"temperature": 20.00, "humidity": 50.50}'


def test_sticky_transport_error_is_still_http_200(base_url, status):
    status["current"] = LatestStatus.failed("I2C error")
    code, _, body = get(base_url + "/data?refresh=1")
    assert code == 200
    assert json.loads(body) == {"error": "I2C error"}


def test_history_returns_full_window(base_url, ring):
    ring.push(Sample(21.0, 52.0))
    ring.push(Sample(22.0, 90.0))
    code, content_type, body = get(base_url + "/history")
    assert code == 200
    assert content_type == "application/json"
    assert body == b'{"temperature": [0.00,0.00,21.00,22.00],"humidity": [0.00,0.00,52.00,90.00]}'


@pytest.mark.parametrize("path", ["/", "/index.html", "/anything/else"])
def test_other_routes_serve_the_page(base_url, path):
    code, content_type, body = get(base_url + path)
    assert code == 200
    assert content_type == "text/html"
    assert body == PAGE


def test_concurrent_requests(base_url, ring):
    for i in range(4):
        ring.push(Sample(float(i), float(i)))
    results = []

    def fetch():
        results.append(json.loads(get(base_url + "/history")[2]))

    threads = [threading.Thread(target=fetch) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(results) == 8
    assert all(r["temperature"] == [0.0, 1.0, 2.0, 3.0] for r in results)


def test_missing_page_fails_at_startup(tmp_path, ring):
    api = SnapshotAPI(ring, lambda: LatestStatus.failed("No data"))
    with pytest.raises(FileNotFoundError):
        WebServer(api, tmp_path / "missing.html")
