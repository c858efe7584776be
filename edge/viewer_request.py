"""
CloudFront viewer-request handler: directory and extension-less paths.

Runs at the edge for every request before it reaches the hosting bucket.
S3 REST origins have no index document support, so ``/blog/`` and ``/blog``
are rewritten to ``/blog/index.html`` while concrete files such as
``/styles.css`` pass through untouched.

Lambda@Edge does not support environment variables, so the log level is
fixed here.
"""

import logging

INDEX_DOCUMENT = "index.html"

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def normalize(uri: str) -> str:
    """
    Return the object path to request for ``uri``.

    Any ``.`` in the whole uri (not just the last segment) marks it as a
    file, so ``/v1.2/docs`` is passed through unchanged.
    """
    if uri.endswith("/"):
        return uri + INDEX_DOCUMENT
    if "." not in uri:
        return f"{uri}/{INDEX_DOCUMENT}"
    return uri


def handler(event, context):
    """Rewrite the request uri in place and hand the request back to CloudFront."""
    request = event["Records"][0]["cf"]["request"]
    from_uri = request["uri"]
    request["uri"] = normalize(from_uri)

    if request["uri"] != from_uri:
        logger.info('Request uri changed to "%s" (was "%s")', request["uri"], from_uri)
    return request
