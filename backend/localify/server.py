import logging, socket, threading, time
import uvicorn
from localify.core.config import Settings
from localify.main import create_app
from localify.models.enums import ServerState
from localify.services.metrics import PerformanceMonitor, PerformanceReport

log = logging.getLogger("localify.server")

_WILDCARD_HOSTS = ("", "0.0.0.0", "::")
_LOOPBACK_HOSTS = ("localhost", "::1")


def local_network_address() -> str | None:
    """IPv4 address of the interface used for outbound traffic, if any."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # connecting a UDP socket sends nothing; it only picks a route
            s.connect(("10.255.255.255", 1))
            ip = s.getsockname()[0]
    except OSError:
        return None
    if ip.startswith("127.") or ip == "0.0.0.0":
        return None
    return ip


class LocalFileServer:
    """The preview HTTP server, run by uvicorn on a background thread.

    Lifecycle is stopped -> starting -> running -> stopped. ``start()`` binds
    the listening socket itself so a busy port is reported synchronously as a
    False return. Calling ``start()`` while running does nothing and returns
    True; ``stop()`` is safe to call in any state.
    """

    def __init__(self, settings: Settings, monitor: PerformanceMonitor | None = None):
        self.settings = settings
        self.monitor = monitor or PerformanceMonitor()
        self.state = ServerState.stopped
        self.url = ""
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._sock: socket.socket | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self.state is ServerState.running

    @property
    def port(self) -> int | None:
        return self._sock.getsockname()[1] if self._sock else None

    def _bind(self) -> socket.socket:
        host = self.settings.HOST
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, self.settings.PORT))
            sock.listen(128)
        except OSError:
            sock.close()
            raise
        return sock

    def _public_url(self, port: int) -> str:
        host = self.settings.HOST
        if host in _WILDCARD_HOSTS:
            host = local_network_address()
        elif host in _LOOPBACK_HOSTS or host.startswith("127."):
            host = None
        if host and ":" in host:
            host = f"[{host}]"
        return f"http://{host or 'localhost'}:{port}/"

    def start(self) -> bool:
        with self._lock:
            if self.state is ServerState.running:
                return True
            self.state = ServerState.starting
            self.monitor.reset()

            try:
                sock = self._bind()
            except OSError as e:
                log.error(
                    "server start failed on %s:%s: %s",
                    self.settings.HOST,
                    self.settings.PORT,
                    e,
                )
                self.state = ServerState.stopped
                return False

            config = uvicorn.Config(
                create_app(self.settings, self.monitor),
                log_config=None,
                access_log=False,
                lifespan="off",
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(
                target=server.run,
                kwargs={"sockets": [sock]},
                name="localify-server",
                daemon=True,
            )
            thread.start()

            deadline = time.monotonic() + self.settings.STARTUP_TIMEOUT_S
            while not server.started and thread.is_alive():
                if time.monotonic() > deadline:
                    break
                time.sleep(0.01)
            if not server.started:
                log.error("server did not come up on port %d", sock.getsockname()[1])
                server.should_exit = True
                thread.join(timeout=self.settings.STARTUP_TIMEOUT_S)
                sock.close()
                self.state = ServerState.stopped
                return False

            self._server, self._thread, self._sock = server, thread, sock
            self.url = self._public_url(sock.getsockname()[1])
            self.state = ServerState.running
            log.info("server started at %s", self.url)
            return True

    def stop(self) -> PerformanceReport | None:
        with self._lock:
            if self._server is None:
                self.state = ServerState.stopped
                return None

            self._server.should_exit = True
            self._thread.join(timeout=self.settings.STARTUP_TIMEOUT_S)
            self._sock.close()
            self._server = self._thread = self._sock = None
            self.url = ""
            self.state = ServerState.stopped

            report = self.monitor.report()
            log.info(
                "server stopped. uptime %.1fs, %d requests, %d errors, "
                "avg %.2fms, p95 %.2fms, max concurrent %d",
                report.uptime_s,
                report.total_requests,
                report.error_responses,
                report.avg_ms,
                report.p95_ms,
                report.max_concurrent,
            )
            return report
