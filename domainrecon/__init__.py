"""domainrecon -- domain reconnaissance scan pipeline."""

__version__ = "1.0.0"
