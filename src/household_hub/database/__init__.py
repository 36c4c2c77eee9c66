"""
MongoDB access layer.

`db_manager` is the process-wide `DatabaseManager`; repositories resolve their
collections through it on every call.
"""

from household_hub.database.manager import DatabaseManager, db_manager

__all__ = ["DatabaseManager", "db_manager"]
