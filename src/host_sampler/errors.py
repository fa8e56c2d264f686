"""Exceptions raised by host_sampler."""


class HostSamplerError(RuntimeError):
    """Base class for sampler errors."""


class ConfigurationError(HostSamplerError):
    """Raised when the sampler cannot be built from its configuration."""


class ProviderError(HostSamplerError):
    """Raised when an OS statistics query fails."""
