from enum import Enum


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_ORGANIZER = "NOT_ORGANIZER"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    ALREADY_ORGANIZER = "ALREADY_ORGANIZER"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_DATE = "INVALID_DATE"
    INVALID_ROLE = "INVALID_ROLE"
    INVALID_TYPE = "INVALID_TYPE"
    TITLE_REQUIRED = "TITLE_REQUIRED"

    ACCOUNT_EXISTS = "ACCOUNT_EXISTS"

    STORAGE_FAILURE = "STORAGE_FAILURE"
