"""lasc -- scaffold a container-image Go function project ready for Lambda."""

__version__ = "0.1.0"
