"""
Error types shared by the study engine and the learning history endpoints
"""


class StudyError(Exception):
    """Base class for study engine errors"""


class InvalidRequestError(StudyError):
    """A request is missing a required field or carries an invalid value"""


class UnauthorizedError(StudyError):
    """The bearer credential is missing, malformed, expired or unknown"""


class SessionStateError(StudyError):
    """An operation was requested in a session state that forbids it"""
