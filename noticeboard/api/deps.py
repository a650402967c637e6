"""Dependencies resolving the per-application collaborators."""

from fastapi import Request

from noticeboard.services.broadcaster import Broadcaster
from noticeboard.services.notifier import NotificationRecorder


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_recorder(request: Request) -> NotificationRecorder:
    return request.app.state.recorder
