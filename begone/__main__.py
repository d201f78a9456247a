"""
Start the maintenance server: ``python -m begone [pages_dir]``.
Further configuration happens via environment variables, see ``Config``.
"""

import os
import sys

from ._config import Config
from ._logging import logger, set_log_level
from ._maintenance import make_app
from ._reload import PageTable, watch_pages
from ._run import run


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) > 1:
        raise SystemExit("Usage: python -m begone [pages_dir]")

    environ = dict(os.environ)
    if argv:
        environ["PAGES_DIR"] = argv[0]
    config = Config.from_env(environ)
    set_log_level(config.log_level)

    logger.info(f"Scanning pages directory: {config.pages_dir}")
    table = PageTable(config.pages_dir)
    app = make_app(table, retry_after=config.retry_after)

    # Not all servers implement lifespan (e.g. daphne), so watch from here
    watcher = None
    if config.watch:
        watcher = watch_pages(table)
        logger.info(f"Watching {table.pages_dir} for changes ...")

    logger.info(f"begone server running on http://{config.bind}")
    try:
        run(app, config.server, config.bind)
    finally:
        if watcher is not None:
            watcher.stop()


if __name__ == "__main__":
    main()
