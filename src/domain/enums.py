"""Domain enumerations and state-transition rules."""

import enum


class ErrorCode(str, enum.Enum):
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_LATITUDE = "INVALID_LATITUDE"
    INVALID_LONGITUDE = "INVALID_LONGITUDE"
    INVALID_USER_ID = "INVALID_USER_ID"
    INVALID_TIGER_ID = "INVALID_TIGER_ID"
    TOO_CLOSE_TO_PREVIOUS_SIGHTING = "TOO_CLOSE_TO_PREVIOUS_SIGHTING"


class NotificationStatus(str, enum.Enum):
    QUEUED = "QUEUED"
    DELIVERING = "DELIVERING"
    DELIVERED = "DELIVERED"
    DROPPED = "DROPPED"


# State machine: maps current status -> set of valid next statuses
NOTIFICATION_TRANSITIONS: dict[NotificationStatus, set[NotificationStatus]] = {
    NotificationStatus.QUEUED: {
        NotificationStatus.DELIVERING,
        NotificationStatus.DROPPED,
    },
    NotificationStatus.DELIVERING: {NotificationStatus.DELIVERED},
    NotificationStatus.DELIVERED: set(),
    NotificationStatus.DROPPED: set(),
}


class Verdict(str, enum.Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
