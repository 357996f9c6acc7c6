"""Region table lookup for absolute pointer coordinates"""

from typing import Iterable, Optional

from ptr2obs.common.types import Position, Region


# Three-monitor table matching:
#   xrandr --output eDP1 --mode 1920x1200 --pos 0x0 --rotate normal
#   xrandr --output DP3-1 --primary --mode 1920x1080 --pos 1920x0 --rotate normal
#   xrandr --output DP3-2 --mode 1920x1080 --pos 3840x0 --rotate left
DEFAULT_REGIONS: tuple[Region, ...] = (
    Region(name="eDP1", x=0, y=0, width=1920, height=1200),
    Region(name="DP3-1", x=1920, y=0, width=1920, height=1080),
    Region(name="DP3-2", x=3840, y=0, width=1080, height=1920),
)


class RegionLayout:
    """Ordered, immutable set of display regions"""

    def __init__(self, regions: Iterable[Region]) -> None:
        """
        Initialize region layout

        Args:
            regions: Regions in lookup order. Overlaps resolve to the first match.
        """
        self._regions: tuple[Region, ...] = tuple(regions)

    @property
    def regions(self) -> tuple[Region, ...]:
        """Get configured regions in lookup order"""
        return self._regions

    def region_resolve(self, position: Position) -> Optional[Region]:
        """
        Find the region containing a position

        Args:
            position: Absolute pointer position

        Returns:
            First matching region, or None if the point is outside every region
        """
        for region in self._regions:
            if region.contains(position):
                return region
        return None

    def region_get(self, name: str) -> Optional[Region]:
        """Look up a region by name"""
        for region in self._regions:
            if region.name == name:
                return region
        return None
