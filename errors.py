"""errors.py — Named failures raised by the chapter pipeline."""


class PrintbookError(Exception):
    """Base class for every failure that aborts a printbook run."""


class ConfigError(PrintbookError):
    pass


class AddressMatchTimeout(PrintbookError):
    """The reader's in-app router never reached the target chapter address."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Address never matched {url} within {timeout:g}s")
        self.url = url
        self.timeout = timeout


class ContentMarkerTimeout(PrintbookError):
    """The content marker element never appeared after the address matched."""

    def __init__(self, selector: str, timeout: float):
        super().__init__(f"Content marker {selector!r} did not appear within {timeout:g}s")
        self.selector = selector
        self.timeout = timeout


class MergeSourceUnreadable(PrintbookError):
    def __init__(self, path, reason: str):
        super().__init__(f"Cannot read chapter PDF {path}: {reason}")
        self.path = path
