"""ptr2obs main entry point"""

import logging

from ptr2obs import __version__
from ptr2obs.app.app_cli import arguments_parse
from ptr2obs.app.app_logging import logging_setup
from ptr2obs.app.bootstrap import (
    configWithOverrides_load,
    displayConnection_establish,
    sessionManager_create,
    supervisor_create,
    zoneMonitor_create,
)
from ptr2obs.x11.display import DisplayManager
from ptr2obs.x11.pointer import PointerTracker

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the reconnect supervisor in the background and poll the pointer forever"""
    args = arguments_parse()
    config = configWithOverrides_load(args)
    logging_setup(config.logging.level, config.logging.format, config.logging.file)
    logger.info("ptr2obs %s starting, endpoint %s", __version__, config.obs.endpoint)

    display_manager = DisplayManager(config.display)
    displayConnection_establish(display_manager)

    session_manager = sessionManager_create(config)
    supervisor_create(config, session_manager).start()

    pointer_tracker = PointerTracker(display_manager)
    monitor = zoneMonitor_create(
        config, pointer_tracker.position_query, session_manager.command_trySend
    )
    for region in config.regions:
        logger.debug(
            "Region %s at (%s, %s) %sx%s",
            region.name, region.x, region.y, region.width, region.height,
        )

    try:
        monitor.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        session_manager.session_discard()
        display_manager.connection_close()


if __name__ == "__main__":
    main()
