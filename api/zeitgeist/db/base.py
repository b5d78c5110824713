"""Import all models here for Alembic autogenerate."""

from zeitgeist.db.base_class import Base
from zeitgeist.models import favorite, history, user, vibe  # noqa: F401

__all__ = ["Base"]
