"""Database Package — declarative Base shared by models, alembic and test fixtures."""
