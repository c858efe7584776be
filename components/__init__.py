"""
Static hosting components.

One shared bucket plus one ComponentResource per website, for clear
ownership, testability, and reuse. Use from the Pulumi entrypoint (e.g.
__main__.py) with config and output chaining:

- **HostingBucket**: private S3 bucket partitioned by domain; exposes
  ``bucket`` for the websites and ``allow_origin_access`` for the policy.
- **Website**: assets, ACM certificate, Lambda@Edge viewer-request function
  and CloudFront distribution for one domain set; exposes
  distribution_domain_name and certificate_validation.
"""

from components.bucket import HostingBucket
from components.website import Website

__all__ = ["HostingBucket", "Website"]
