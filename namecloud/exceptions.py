"""
Exceptions raised by namecloud.

Workflows raise these instead of terminating the process; the CLI entry point
is the only place that turns them into an exit status.
"""


class NamecloudError(Exception):
    """Base class for all namecloud errors."""


class ConfigError(NamecloudError):
    """Configuration is missing or malformed."""


class BootstrapError(NamecloudError):
    """API clients could not be constructed or the account could not be resolved."""


class ProviderError(NamecloudError):
    """An API call failed or the API reported an error."""


class RegistrarError(ProviderError):
    """Namecheap API error. ``codes`` holds the API's numeric error codes."""

    def __init__(self, message, codes=None):
        super().__init__(message)
        self.codes = list(codes or [])


class ZoneProviderError(ProviderError):
    """Cloudflare API error."""


class DomainParseError(NamecloudError):
    """A domain name could not be split into label and public suffix."""


class TransferError(NamecloudError):
    """A transfer precondition failed, or the transfer failed after bailout."""


class BailoutError(TransferError):
    """A compensating call failed while rolling back a transfer."""
