"""REST API over the One Piece catalog."""

__version__ = "0.1.0"
