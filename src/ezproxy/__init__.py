"""ezproxy: corporate proxy and CA trust configuration for developer tools."""

__version__ = "0.1.0"
