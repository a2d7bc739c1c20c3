"""slack-build-notifier - render Cloud Build events into Slack webhook messages."""

from importlib.metadata import version

try:
    __version__ = version("slack-build-notifier")
except Exception:
    __version__ = "0.0.0-dev"
