"""Expose ORM models at package level.

Importing the package registers every table on ``Base.metadata`` so
``create_all`` sees them.
"""

from .app_state import AppState  # noqa: F401
from .base import Base  # noqa: F401
