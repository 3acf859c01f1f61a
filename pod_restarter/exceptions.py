"""
Errors raised by the Kubernetes directory adapter
"""


class PodRestarterError(Exception):
    """Base class for Pod Restarter errors"""


class DirectoryConfigError(PodRestarterError):
    """Kubernetes credentials could not be loaded or the client not built"""


class DirectoryUnavailable(PodRestarterError):
    """The Kubernetes API could not be reached or rejected the request"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class NotFound(PodRestarterError):
    """The requested object does not exist (anymore)"""
