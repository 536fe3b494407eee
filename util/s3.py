"""S3 client utility."""

import boto3

_client = None


def get_s3_client():
    """Get the S3 client (lazy initialization, reused across Lambda invocations)."""
    global _client
    if _client is None:
        _client = boto3.client("s3")
    return _client


def _clear_client():
    """Clear the cached client (for testing only)."""
    global _client
    _client = None
