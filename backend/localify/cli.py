import argparse, logging, signal, threading
from pathlib import Path
from localify.core.config import Settings
from localify.core.logging import setup_logging
from localify.server import LocalFileServer
from localify.services.store import ProjectStore

log = logging.getLogger("localify")


def build_settings(argv=None) -> Settings:
    parser = argparse.ArgumentParser(description="Serve Localify projects for preview")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--projects-dir", type=Path)
    args = parser.parse_args(argv)
    overrides = {
        "HOST": args.host,
        "PORT": args.port,
        "PROJECTS_DIR": args.projects_dir,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv=None) -> int:
    settings = build_settings(argv)
    setup_logging(settings.LOG_LEVEL, settings.LOG_LEVELS)

    store = ProjectStore(settings.PROJECTS_DIR)
    projects = store.load_projects()
    log.info("%d project(s) in %s", len(projects), store.root)

    server = LocalFileServer(settings)
    if not server.start():
        return 1
    for p in projects:
        log.info("preview %r at %sprojects/%s/index.html", p.name, server.url, p.id)

    done = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: done.set())
    signal.signal(signal.SIGTERM, lambda *_: done.set())
    done.wait()
    server.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
