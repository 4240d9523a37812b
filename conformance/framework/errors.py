"""
Harness error types.
"""


class HarnessError(Exception):
    """Base class for every error raised by the harness."""
    pass


class TraceLoadError(HarnessError):
    """A trace file could not be opened or decoded."""
    pass


class ManifestError(HarnessError):
    """The extension manifest is missing or invalid."""
    pass


class HostProtocolError(HarnessError):
    """The host answered with an error or broke the wire protocol."""
    pass


class HostNotReadyError(HarnessError):
    """The host did not report active extensions within the configured wait."""
    pass


class PayloadExhaustedError(HarnessError):
    """A payload provider has no more payloads to hand out."""
    pass
