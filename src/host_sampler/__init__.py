"""host_sampler – periodic host resource sampler."""

__version__ = "0.1.0"
