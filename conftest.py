"""Root pytest configuration: enables the CMS harness fixtures."""

pytest_plugins = ("cms.testing.plugin",)
