"""
Multi-site static hosting - IaC entrypoint.

Wires one shared bucket and one Website component per configured site:

- **HostingBucket**: private S3 bucket named ``<account>-<region>-hosting``;
  each website lives under its own ``<domain>/`` prefix.
- **Website**: per site, an ACM certificate and CloudFront distribution for
  the primary domain plus its alternates (explicit ones and derived ``www.``
  variants), with the viewer-request edge function rewriting directory URLs
  to ``index.html``. Assets are uploaded for sites with ``deployment: true``.

The stack must run in us-east-1; config validation aborts the run otherwise.

Stack exports: bucket_name and, per website name, <name>_distribution_domain,
<name>_certificate_validation and <name>_domains.
"""

import pulumi
import pulumi_aws as aws

from components import HostingBucket, Website
from components._helpers import hosting_bucket_name
from config import StackConfig


def _component_name(project_name: str, environment: str, prefix: str) -> str:
    return f"{prefix}-{project_name}-{environment}"


def main():
    """
    Build the shared bucket and every website, then export stack outputs.

    Reads and validates config (project_name, environment, assets_dir,
    websites, aws:region) before declaring anything, creates one Website per
    entry on top of the shared bucket, attaches the bucket policy for all
    origin identities, and exports the distribution domains and certificate
    validation records.
    """
    config = StackConfig.from_pulumi_config(pulumi.Config(), pulumi.Config("aws"))

    def name(prefix: str) -> str:
        return _component_name(config.project_name, config.environment, prefix)

    identity = aws.get_caller_identity()
    hosting = HostingBucket(
        name=name("hosting"),
        bucket_name=hosting_bucket_name(identity.account_id, config.region),
    )

    websites = []
    for spec in config.websites:
        pulumi.log.info(f"{spec.name}: serving {', '.join(spec.domain_set())}")
        websites.append(
            (
                spec,
                Website(
                    name=name(spec.name),
                    domain_name=spec.domain_name,
                    alternate_domains=spec.alternate_domains(),
                    bucket=hosting.bucket,
                    asset_dir=config.asset_dir(spec) if spec.deployment else None,
                ),
            )
        )

    hosting.allow_origin_access(
        [
            (website.origin_access_identity.iam_arn, website.domain_name)
            for _, website in websites
        ]
    )

    pulumi.export("bucket_name", hosting.bucket_id)
    for spec, website in websites:
        for output_name, value in [
            (f"{spec.name}_distribution_domain", website.distribution_domain_name),
            (f"{spec.name}_certificate_validation", website.certificate_validation),
            (f"{spec.name}_domains", website.domains),
        ]:
            pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
