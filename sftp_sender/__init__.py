"""Upload and download files over SFTP, with autosend to numbered workers."""

__version__ = "v0.0.2"

__all__ = ["__version__"]
