"""X11 pointer position source"""

import logging
from typing import Optional

from Xlib.error import ConnectionClosedError, XError

from ptr2obs.common.types import Position
from ptr2obs.x11.display import DisplayManager

logger = logging.getLogger(__name__)


class PointerTracker:
    """Queries the absolute pointer position on the root window"""

    def __init__(self, display_manager: DisplayManager) -> None:
        """
        Initialize pointer tracker

        Args:
            display_manager: X11 display manager
        """
        self._display_manager: DisplayManager = display_manager

    def position_query(self) -> Optional[Position]:
        """
        Query current pointer position

        Returns:
            Current pointer position in root-window coordinates, or None when
            the query fails
        """
        try:
            display = self._display_manager.display_get()
            pointer_data = display.screen().root.query_pointer()
        except (XError, ConnectionClosedError, RuntimeError) as exc:
            logger.warning("Pointer query failed: %s", exc)
            return None

        return Position(x=pointer_data.root_x, y=pointer_data.root_y)
