class ShareError(Exception):
    """
    Base exception for all openwith failures.
    """

    pass


class InvalidShareEventError(ShareError):
    """
    Raised when a wire-form share event cannot be parsed.
    """

    pass


class ContentIndexError(ShareError):
    """
    Raised when a content index is misconfigured (e.g. missing schema).
    """

    pass
