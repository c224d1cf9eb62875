"""
Test utilities for sitesnap.

Components:
    SnapshotStoreConformanceSuite: Contract tests any SnapshotStore
        implementation can inherit and run

Example:
    >>> from sitesnap.testing import SnapshotStoreConformanceSuite
    >>>
    >>> class TestMyStoreConformance(SnapshotStoreConformanceSuite):
    ...     def create_store(self) -> SnapshotStore:
    ...         return MySnapshotStore()

Note:
    This module is optional and intended for test code only. It should not
    be imported in production code paths.
"""

from sitesnap.testing.conformance import SnapshotStoreConformanceSuite

__all__ = ["SnapshotStoreConformanceSuite"]
