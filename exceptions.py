"""
Exception types for the agenda pipeline

Every error we raise on purpose derives from CivicAgendaError and carries a
context dict, so log lines and CLI output can say which source, vendor, URL
or file was involved without re-parsing the message.

Levels:
- VendorError: an upstream call or payload went wrong
- StorageError: a persisted JSON document could not be read or written
- ConfigurationError: the environment is misconfigured
"""

from typing import Any, Dict, Optional


class CivicAgendaError(Exception):
    """Root of the pipeline's exception tree

    `message` is the bare text; str() appends the context dict.
    """

    # Permanent unless a subclass says otherwise
    _retryable: bool = False

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether running the same call again could plausibly succeed"""
        return self._retryable

    def __str__(self):
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} (context: {details})"


# ========== Vendor Errors ==========


class VendorError(CivicAgendaError):
    """Something went wrong talking to an upstream source"""

    def __init__(
        self,
        message: str,
        vendor: str,
        source: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.vendor = vendor
        self.source = source
        self.original_error = original_error

        context: Dict[str, Any] = {"vendor": vendor}
        if source:
            context["source"] = source
        if original_error:
            context["original_error"] = str(original_error)

        super().__init__(message, context)


class VendorHTTPError(VendorError):
    """Non-2xx response, timeout or transport failure

    Seen in practice:
    - 403 from the City Secretary site
    - 500/503 from the Legistar Web API during maintenance
    - timeouts on Granicus AgendaViewer pages

    Server-side failures and timeouts may clear up; 4xx answers will not.
    """

    def __init__(
        self,
        message: str,
        vendor: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        source: Optional[str] = None,
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(message, vendor=vendor, source=source)

        if status_code:
            self.context["status_code"] = status_code
        if url:
            self.context["url"] = url

    @property
    def is_retryable(self) -> bool:
        if self.status_code is None:
            return True
        return self.status_code >= 500


class VendorParsingError(VendorError):
    """Upstream answered, but not with anything we can read

    Examples:
    - Legistar returned an error object instead of a list
    - RSS feed is not well-formed XML
    """
    pass


# ========== Storage Errors ==========


class StorageError(CivicAgendaError):
    """Persisted source document could not be read or written"""

    def __init__(self, message: str, path: Optional[str] = None, original_error: Optional[Exception] = None):
        self.path = path
        self.original_error = original_error

        context: Dict[str, Any] = {}
        if path:
            context["path"] = path
        if original_error:
            context["original_error"] = str(original_error)

        super().__init__(message, context)


class SourceNotFoundError(StorageError):
    """No persisted document exists for a source yet"""
    pass


# ========== Configuration Errors ==========


class ConfigurationError(CivicAgendaError):
    """Bad environment configuration

    Examples:
    - Non-integer window size
    - Unknown source key
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        super().__init__(message, {"config_key": config_key} if config_key else None)
