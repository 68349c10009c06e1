"""Run the idlease server: ``python -m idlease``."""
import logging
import sys

from .allocator import Allocator
from .config import load_config
from .errors import ConfigError
from .reclaimer import Reclaimer
from .server import create_app

logger = logging.getLogger("idlease")


def main():
    try:
        config = load_config()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s: %(message)s")
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [idlease] %(levelname)s %(message)s",
    )

    allocator = Allocator(config.min_id, config.max_id, config.timeout_ms)
    reclaimer = Reclaimer(allocator, config.sweep_interval_ms)
    app = create_app(allocator)

    logger.info(
        "Serving ids %d..%d (timeout %d ms) on http://%s:%d",
        config.min_id, config.max_id, config.timeout_ms, config.host, config.port,
    )

    from cheroot import wsgi
    server = wsgi.Server((config.host, config.port), app)
    reclaimer.start()
    try:
        server.start()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
        reclaimer.stop()


if __name__ == "__main__":
    main()
