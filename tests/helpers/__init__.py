"""Test helpers package."""

from tests.helpers.transports import MessageRecorder, attach_recorder
from tests.helpers.wait import wait_until

__all__ = ["MessageRecorder", "attach_recorder", "wait_until"]
