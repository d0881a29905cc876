class BibleError(Exception):
    """Base class for errors raised by bible_processing."""


class MalformedReferenceError(BibleError, ValueError):
    def __init__(self, reference, reason):
        super().__init__(f"Malformed reference {reference!r}: {reason}")
        self.reference = reference
        self.reason = reason


class EmptyImportError(BibleError, ValueError):
    def __init__(self, message="No verses found in uploaded file"):
        super().__init__(message)


class BibleFormatError(BibleError, ValueError):
    """Upload matched a known shape but a nested value is unusable."""


class StoreWriteError(BibleError, RuntimeError):
    def __init__(self, version, batch_index, committed, cause):
        super().__init__(
            f"Insert failed for {version} batch {batch_index} "
            f"({committed} verses committed before it): {cause}"
        )
        self.version = version
        self.batch_index = batch_index
        self.committed = committed


class UpstreamServiceError(BibleError, RuntimeError):
    def __init__(self, service, cause):
        super().__init__(f"{service} failed: {cause}")
        self.service = service


class InvalidAudioError(BibleError, ValueError):
    """Uploaded audio could not be decoded."""
