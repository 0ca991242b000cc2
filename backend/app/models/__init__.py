"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from app.models.user import User  # noqa: F401
from app.models.video import Video  # noqa: F401
from app.models.action_log import ActionLog  # noqa: F401
