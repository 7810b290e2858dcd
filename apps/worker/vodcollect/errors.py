"""
Exception hierarchy for the collection pipeline
"""
from typing import Optional


class CollectError(Exception):
    """Base class for every recoverable or task-fatal collection failure"""


class NetworkError(CollectError):
    """Connection-level failure talking to a remote host"""


class RemoteTimeoutError(NetworkError):
    """A remote request exceeded its timeout"""


class HttpStatusError(NetworkError):
    """Remote answered with a non-success HTTP status"""

    def __init__(self, url: str, status: int):
        super().__init__(f"HTTP {status} from {url}")
        self.url = url
        self.status = status


class ApiProtocolError(CollectError):
    """Response body is not a valid aggregator envelope, or code != 1"""


class PageCountError(CollectError):
    """The page-count check failed on every attempt"""


class BindingNotFoundError(CollectError):
    """No local category is bound to an external category of a source"""

    def __init__(self, source_flag: str, external_id: str):
        super().__init__(f"No category binding for source_flag={source_flag}, external_id={external_id}")
        self.source_flag = source_flag
        self.external_id = external_id


class StorageError(CollectError):
    """Writing to local storage or the catalog failed"""


class DownloadError(CollectError):
    """An image could not be localized after all attempts"""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Failed to download {url} after {attempts} attempts: {last_error}")
        self.url = url
        self.attempts = attempts


class SourceNotFoundError(CollectError):
    """Referenced collection source does not exist"""
