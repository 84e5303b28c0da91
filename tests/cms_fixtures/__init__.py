"""Migrations, plugins and modules referenced by test harness configs."""
