"""Query handlers for requirement, availability and alert lookups."""
from src.query.requirements_handler import RequirementsHandler
from src.query.snapshot_reader import SnapshotReader

__all__ = ["RequirementsHandler", "SnapshotReader"]
