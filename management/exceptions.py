from rest_framework import status
from rest_framework.exceptions import APIException


class TimerAlreadyRunning(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "A timer is already running. Stop it before starting another."
    default_code = 'timer_already_running'


class NoActiveTimer(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "No active timer to stop"
    default_code = 'no_active_timer'


class InvalidTimeRange(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "End time must be after start time."
    default_code = 'invalid_time_range'
