import sys
from types import MappingProxyType

from flask import Flask, Response, request
from werkzeug.serving import make_server

# Every route answers regardless of method, like a plain ServeMux handler.
METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class ConfigurationError(Exception):
    """Raised when the route table is misused."""


def parse_address(address):
    """Accepts ("host", port) or "host:port"; an empty host means all interfaces."""
    if isinstance(address, str):
        host, _, port = address.rpartition(":")
        return host or "0.0.0.0", int(port)
    host, port = address
    return host or "0.0.0.0", int(port)


class Responder:
    """Owns the route table and the single HTTP listener.

    Routes are registered while the responder is unbound. Binding is a one
    way transition: afterwards the table is frozen and any further
    ``register`` or ``bind`` raises ``ConfigurationError``.
    """

    def __init__(self, import_name="ahoi"):
        self.app = Flask(import_name)
        self._routes = {}
        self._server = None

    @property
    def routes(self):
        return MappingProxyType(self._routes)

    @property
    def serving(self):
        return self._server is not None

    def register(self, path, handler):
        if self.serving:
            raise ConfigurationError(f"Cannot register {path!r}: route table is frozen")
        if path in self._routes:
            raise ConfigurationError(f"Path {path!r} is already registered")

        # Flask endpoints may not contain dots, so name them by position.
        endpoint = f"route_{len(self._routes)}"
        try:
            self.app.add_url_rule(path, endpoint=endpoint, view_func=self._view(handler), methods=METHODS)
        except ValueError as e:
            raise ConfigurationError(f"Cannot register {path!r}: {e}") from e
        self._routes[path] = handler

    def _view(self, handler):
        def view():
            body, status = handler(request)
            return Response(body, status=status, mimetype="text/plain")

        view.__name__ = handler.__name__
        return view

    def bind(self, address):
        """Creates the listener, or exits the process if the OS refuses it."""
        if self.serving:
            raise ConfigurationError("Responder is already serving")

        host, port = parse_address(address)
        try:
            server = make_server(host, port, self.app, threaded=True)
        except OSError as e:
            reason = e.strerror or str(e)
        except SystemExit:
            # Werkzeug reports a refused bind on stderr and exits by itself.
            reason = "address unavailable"
        else:
            self._server = server
            return server

        self.app.logger.critical(f"Could not listen on {host}:{port}: {reason}")
        sys.exit(1)

    def serve(self, address):
        """Binds ``address`` and handles requests until the process dies."""
        server = self.bind(address)
        host, port = server.server_address[:2]
        self.app.logger.info(f"Listening on {host}:{port}")
        try:
            server.serve_forever()
        finally:
            server.server_close()
