"""
Pure helpers for domain sets, naming, bucket layout and assets. Testable
without Pulumi runtime.

Used by config.py (compute_alternate_domains, is_valid_domain), the Website
component (discover_assets, key_prefix, origin_path) and the HostingBucket
component (origin_read_policy). No Pulumi types; all functions accept and
return plain Python types so they can be unit-tested without a Pulumi stack.
"""

import mimetypes
import re
from pathlib import Path
from typing import NamedTuple, Sequence

WWW_PREFIX = "www."

# Lowercase RFC 1123 label: 1-63 chars, no leading/trailing hyphen.
_LABEL = r"(?!-)[a-z0-9-]{1,63}(?<!-)"
_DOMAIN_RE = re.compile(rf"{_LABEL}(?:\.{_LABEL})+")
_MAX_DOMAIN_LEN = 253


class Asset(NamedTuple):
    """A local file to upload, keyed relative to its website's asset root."""

    key: str
    path: str
    content_type: str | None


def compute_alternate_domains(
    primary_domain: str,
    explicit_alternates: Sequence[str],
) -> list[str]:
    """
    Return every hostname a website answers to besides its primary domain.

    The result is the explicit alternates in their given order, followed by a
    derived ``www.`` variant for each non-www domain (primary first) whose
    variant is not already present. Domains that already start with ``www.``
    never get a second prefix.

    Args:
        primary_domain: Canonical domain (e.g. "example.org").
        explicit_alternates: Configured extra hostnames; duplicates are kept.

    Returns:
        Alternate names for the certificate and distribution aliases; never
        contains ``primary_domain``.
    """
    domains = [primary_domain, *explicit_alternates]
    present = set(domains)
    derived: list[str] = []
    # Iterate the snapshot only; derived entries are never rescanned.
    for domain in domains:
        if domain.startswith(WWW_PREFIX):
            continue
        www_domain = f"{WWW_PREFIX}{domain}"
        if www_domain not in present:
            present.add(www_domain)
            derived.append(www_domain)
    alternates = [domain for domain in domains[1:] if domain != primary_domain]
    return alternates + derived


def is_valid_domain(
    domain: str,
) -> bool:
    """
    Return True for a lowercase hostname with at least two labels.

    Trailing dots, wildcards, uppercase and underscores are rejected since
    ACM and CloudFront aliases are configured with the plain form.
    """
    return len(domain) <= _MAX_DOMAIN_LEN and bool(_DOMAIN_RE.fullmatch(domain))


def hosting_bucket_name(
    account_id: str,
    region: str,
) -> str:
    """Shared bucket name, e.g. '123456789012-us-east-1-hosting'."""
    return f"{account_id}-{region}-hosting"


def key_prefix(
    domain: str,
) -> str:
    """Object key prefix holding one website's files, e.g. 'example.org/'."""
    return f"{domain}/"


def origin_path(
    domain: str,
) -> str:
    """CloudFront origin path for one website, e.g. '/example.org'."""
    return f"/{domain}"


def discover_assets(
    root: str,
) -> list[Asset]:
    """
    List every file under ``root`` as an Asset, sorted by key.

    Keys use forward slashes regardless of platform. Content type is guessed
    from the file name and left as None when unknown (S3 then applies its
    default).
    """
    base = Path(root)
    assets = []
    for path in sorted(base.rglob("*")):
        if not path.is_file():
            continue
        content_type, _ = mimetypes.guess_type(path.name)
        assets.append(
            Asset(
                key=path.relative_to(base).as_posix(),
                path=str(path),
                content_type=content_type,
            )
        )
    return assets


def origin_read_policy(
    bucket_arn: str,
    grants: Sequence[tuple[str, str]],
) -> dict:
    """
    Build the bucket policy letting each origin identity read its own prefix.

    Args:
        bucket_arn: ARN of the shared hosting bucket.
        grants: (origin access identity IAM ARN, domain) pairs.

    Returns:
        Policy document as a dict, ready for json.dumps.
    """
    statements = [
        {
            "Sid": f"AllowOriginRead{index}",
            "Effect": "Allow",
            "Principal": {"AWS": iam_arn},
            "Action": "s3:GetObject",
            "Resource": f"{bucket_arn}/{key_prefix(domain)}*",
        }
        for index, (iam_arn, domain) in enumerate(grants)
    ]
    return {"Version": "2012-10-17", "Statement": statements}
