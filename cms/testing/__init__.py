"""Test-framework integration: database bootstrap, per-test transaction
rollback and helpers for asserting events and stubbing components.

Use the pytest fixtures in `cms.testing.plugin` or drive `CmsTestHarness`
directly from another runner's hooks (see tests/integration for behave).
"""

from cms.testing.config import HarnessConfig, load_harness_config
from cms.testing.harness import CmsTestHarness

__all__ = ["CmsTestHarness", "HarnessConfig", "load_harness_config"]
