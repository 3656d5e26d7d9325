"""
Local HTTP listener that catches the OAuth 1.0a browser redirect.

The provider sends the browser back to the callback URI with
``oauth_token`` and ``oauth_verifier`` in the query string. The listener
hands the full redirect URL to a handler (which performs the token
exchange), answers the browser and releases whoever is waiting.
"""
import http.server
import logging
import threading
from enum import Enum
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

OK_BODY = "Ok."
NOT_FOUND_BODY = "Not found."
DENIED_BODY = "Authorization denied."


class AuthorizationDenied(ValueError):
    """The user or the provider refused the authorization request."""


class ReceiverState(Enum):
    CREATED = "created"
    LISTENING = "listening"
    COMPLETED = "completed"


class RedirectRequestHandler(http.server.BaseHTTPRequestHandler):
    """Accepts any method and defers to the owning CallbackReceiver."""

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)

    def handle_redirect(self):
        # Drain a request body so the browser sees a clean response
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            length = 0
        if length:
            self.rfile.read(length)
        self.server.receiver.handle_request(self)

    do_GET = handle_redirect
    do_POST = handle_redirect
    do_PUT = handle_redirect
    do_PATCH = handle_redirect
    do_DELETE = handle_redirect
    do_HEAD = handle_redirect
    do_OPTIONS = handle_redirect

    def reply(self, status, body):
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)


class CallbackReceiver:
    """
    One-shot redirect listener: CREATED -> LISTENING -> COMPLETED.

    ``on_redirect(url)`` is called with the full redirect URL. Returning
    normally completes the receiver (200). Raising AuthorizationDenied
    completes it with ``error`` set (403). Any other error is logged and
    answered with 404, and the receiver keeps listening. Once cancelled or
    closed, redirects are refused and the receiver can no longer complete.
    """

    def __init__(self, callback_uri, on_redirect):
        parsed = urlparse(callback_uri)
        if parsed.scheme != "http":
            raise ValueError(f"Callback URI must be a plain http:// URI, got '{callback_uri}'")

        self._parsed = parsed
        self._host = parsed.hostname or "localhost"
        self._port = parsed.port if parsed.port is not None else 80
        self._path = parsed.path.rstrip("/") or "/"
        self._on_redirect = on_redirect

        self._lock = threading.Lock()
        self._completed = threading.Event()
        self._cancelled = False
        self._server = None
        self._thread = None

        self.state = ReceiverState.CREATED
        self.error = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def port(self):
        return self._port

    @property
    def callback_uri(self):
        """Callback URI with the port actually bound (matters when configured with port 0)."""
        netloc = f"{self._host}:{self.port}"
        return self._parsed._replace(netloc=netloc).geturl()

    def open(self):
        if self.state is not ReceiverState.CREATED:
            raise RuntimeError(f"Callback receiver cannot be opened in state {self.state.value}")

        self._server = http.server.ThreadingHTTPServer((self._host, self._port), RedirectRequestHandler)
        self._server.receiver = self
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="oauth1-callback-listener",
            daemon=True,
        )
        self._thread.start()
        self.state = ReceiverState.LISTENING
        logger.info(f"📥 Listening for the authorization redirect on {self.callback_uri}")
        return self

    def cancel(self):
        """
        Stop accepting redirects. A redirect already being handled finishes
        first; returns True if it completed the receiver.
        """
        with self._lock:
            if self._completed.is_set():
                return True
            self._cancelled = True
            return False

    def close(self):
        if self._server is None:
            return
        self.cancel()
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()
        self._server = None
        self._thread = None
        logger.debug("Callback listener closed")

    def wait(self, timeout=None):
        """Block until the redirect has been handled. Returns False on timeout."""
        return self._completed.wait(timeout)

    @property
    def completed(self):
        return self._completed.is_set()

    def _matches(self, request_path):
        return (request_path.rstrip("/") or "/") == self._path

    def handle_request(self, handler):
        if not self._matches(urlparse(handler.path).path):
            handler.reply(404, NOT_FOUND_BODY)
            return

        with self._lock:
            if self._completed.is_set():
                logger.warning("⚠️  Ignoring redirect received after authorization already completed")
                handler.reply(404, NOT_FOUND_BODY)
                return
            if self._cancelled:
                logger.warning("⚠️  Ignoring redirect received after authorization was abandoned")
                handler.reply(404, NOT_FOUND_BODY)
                return

            redirect_url = f"http://{self._host}:{self.port}{handler.path}"
            try:
                self._on_redirect(redirect_url)
            except AuthorizationDenied as e:
                logger.error(f"❌ Authorization denied: {e}")
                self.error = e
                self._complete()
                handler.reply(403, DENIED_BODY)
            except (ValueError, requests.exceptions.RequestException) as e:
                logger.error(f"❌ Error: {e}")
                handler.reply(404, NOT_FOUND_BODY)
            except Exception as e:
                logger.error(f"❌ Unexpected error handling redirect: {e}", exc_info=True)
                handler.reply(404, NOT_FOUND_BODY)
            else:
                self._complete()
                handler.reply(200, OK_BODY)

    def _complete(self):
        self.state = ReceiverState.COMPLETED
        self._completed.set()
