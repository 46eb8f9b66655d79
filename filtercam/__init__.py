"""Live face filter package.

Places decorative overlays on facial landmarks and manages the scrolling
filter carousel that picks which overlay set is active.
"""

from . import config as config
from . import types as types
from . import catalog as catalog
from . import carousel as carousel
from . import keypoints as keypoints
from . import overlay as overlay
from . import selection as selection
from . import scheduler as scheduler
from . import progress as progress

__all__ = [
    "config",
    "types",
    "catalog",
    "carousel",
    "keypoints",
    "overlay",
    "selection",
    "scheduler",
    "progress",
]
