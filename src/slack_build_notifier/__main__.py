"""Allow running as ``python -m slack_build_notifier``."""

from slack_build_notifier.cli import run

run()
