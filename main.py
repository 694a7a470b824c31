# main.py
import argparse
import logging
import signal
import sys
import threading

from acquisition import AcquisitionLoop
from config import Config
from history import HistoryRing
from sensors import HTU21DSource
from server import WebServer
from snapshot import SnapshotAPI


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="HTU21D temperature/humidity web service")
    parser.add_argument("--port", type=int, help="HTTP listen port (default 80)")
    parser.add_argument("--interval", type=float, help="polling interval in seconds (default 1)")
    parser.add_argument("--history-size", type=int, dest="history_size",
                        help="number of samples kept for /history (default 300)")
    parser.add_argument("--log-level", dest="log_level", help="logging level (default INFO)")
    return parser.parse_args(argv)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(config):
    handlers = [logging.StreamHandler()]
    file_error = None
    if config.log_file:
        try:
            handlers.insert(0, logging.FileHandler(config.log_file))
        except OSError as e:
            file_error = e
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
    if file_error is not None:
        logging.warning("Cannot open log file %s, logging to stderr only: %s", config.log_file, file_error)
    return handlers


def main(argv=None):
    args = parse_args(argv)
    try:
        config = Config().update(**vars(args))
    except ValueError as e:
        logging.basicConfig(format=LOG_FORMAT)
        logging.error("Configuration error: %s", e)
        return 1

    setup_logging(config)
    logging.info("Configuration: %s", config)

    ring = HistoryRing(config.history_size)
    acquisition = AcquisitionLoop(HTU21DSource(config.i2c_address), ring, config.interval)
    snapshot_api = SnapshotAPI(ring, lambda: acquisition.status)

    try:
        server = WebServer(snapshot_api, config.page_path).create_server('', config.port)
    except OSError as e:
        logging.error("Could not start HTTP server on port %d: %s", config.port, e)
        return 1

    def handle_sigterm(signum, frame):
        logging.info("Received signal %s", signum)
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGTERM, handle_sigterm)

    acquisition.start()
    try:
        logging.info("HTTP server started on port %d", server.server_address[1])
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info("Shutting down")
    finally:
        acquisition.stop()
        server.server_close()
        logging.info("Cleanup complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
