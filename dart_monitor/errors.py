class FetchError(Exception):
    """Raised when a filing document cannot be downloaded or unpacked."""
    pass


class ListingError(Exception):
    """Raised when a listing page comes back with a bad status or not at all."""
    pass


class NotificationError(Exception):
    """Raised when the messaging endpoint refuses or never receives an alert."""
    pass
