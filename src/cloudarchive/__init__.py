"""Cloud Archive - browse and download Google Cloud Storage buckets behind Google sign-in."""

__version__ = "0.1.0"
