"""Unit tests for the X11 pointer source"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from Xlib.error import ConnectionClosedError

from ptr2obs.common.types import Position
from ptr2obs.x11.display import DisplayManager
from ptr2obs.x11.pointer import PointerTracker


class TestPointerTrackerQuery:
    """Test pointer position queries"""

    @pytest.fixture
    def mock_display_manager(self):
        """Create mock DisplayManager"""
        return Mock()

    @pytest.fixture
    def tracker(self, mock_display_manager):
        """Create PointerTracker with mocked display"""
        return PointerTracker(display_manager=mock_display_manager)

    def _pointer_set(self, display_manager, x, y):
        root = display_manager.display_get.return_value.screen.return_value.root
        root.query_pointer.return_value = SimpleNamespace(root_x=x, root_y=y)
        return root

    def test_position_query(self, tracker, mock_display_manager):
        """Test query returns root-window coordinates"""
        self._pointer_set(mock_display_manager, 3850, 10)

        assert tracker.position_query() == Position(x=3850, y=10)

    def test_query_error_returns_none(self, tracker, mock_display_manager):
        """Test X connection loss yields None instead of raising"""
        root = self._pointer_set(mock_display_manager, 0, 0)
        root.query_pointer.side_effect = ConnectionClosedError("server")

        assert tracker.position_query() is None

    def test_not_connected_returns_none(self):
        """Test querying before the display is open yields None"""
        tracker = PointerTracker(DisplayManager(display_name=":99"))
        assert tracker.position_query() is None


class TestDisplayManager:
    """Test display manager lifecycle without a real X server"""

    def test_display_get_requires_connection(self):
        """Test display_get raises before connection_establish"""
        with pytest.raises(RuntimeError, match="Not connected"):
            DisplayManager().display_get()

    def test_close_without_connection(self):
        """Test closing an unopened display is a no-op"""
        DisplayManager().connection_close()
