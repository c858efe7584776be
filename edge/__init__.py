"""
Lambda@Edge sources.

The directory is shipped as-is as the function code archive, so modules here
must only depend on the Lambda Python runtime.
"""
