from http import server
import socketserver
import logging
from urllib.parse import urlsplit


class WebServer:
    def __init__(self, snapshot_api, page_path):
        self.snapshot_api = snapshot_api
        with open(page_path, 'rb') as f:
            self.page = f.read()

    class TelemetryHandler(server.BaseHTTPRequestHandler):
        def __init__(self, *args, **kwargs):
            self.server_ref = kwargs.pop('server_ref')
            super().__init__(*args, **kwargs)

        def do_GET(self):
            path = urlsplit(self.path).path
            try:
                if path == '/data':
                    self.send_body(self.server_ref.snapshot_api.latest_json(), 'application/json')
                elif path == '/history':
                    self.send_body(self.server_ref.snapshot_api.history_json(), 'application/json')
                else:
                    self.send_body(self.server_ref.page, 'text/html')
            except (BrokenPipeError, ConnectionResetError) as e:
                logging.warning('Client %s disconnected: %s', self.client_address, e)
            except Exception as e:
                logging.error('Request error on %s: %s', path, e)
                self.send_error(500)

        def send_body(self, content, content_type):
            self.send_response(200)
            self.send_header('Content-Type', content_type)
            self.send_header('Content-Length', len(content))
            self.end_headers()
            self.wfile.write(content)

        def log_message(self, format, *args):
            logging.debug('%s - %s', self.address_string(), format % args)

    class TelemetryServer(socketserver.ThreadingMixIn, server.HTTPServer):
        allow_reuse_address = True
        daemon_threads = True

    def create_server(self, host, port):
        return self.TelemetryServer(
            (host, port),
            lambda *args, **kwargs: self.TelemetryHandler(*args, server_ref=self, **kwargs)
        )
