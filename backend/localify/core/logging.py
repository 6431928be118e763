import logging, json, sys, threading


class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
        }
        # the preview server logs from its own thread
        if record.threadName != threading.main_thread().name:
            payload["thread"] = record.threadName
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", logger_levels: dict[str, str] | None = None):
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers = [h]
    # uvicorn installs its own handlers; route them through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
    # e.g. {"localify.requests": "WARNING"} to silence per-request lines
    for name, lvl in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(lvl.upper())
