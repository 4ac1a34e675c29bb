"""Expose commonly used ORM models at package level.

These re-exports are intentional so callers can import from
``models`` (e.g. `from models import SavedBlueprint`). The `F401` noqa
suppresses unused-import warnings for the explicit re-exports.
"""

from .base import Base  # noqa: F401
from .blueprints import SavedBlueprint  # noqa: F401
from .devices import DeviceFingerprint, SpamLog  # noqa: F401
from .usage import UserDailyUsage  # noqa: F401
