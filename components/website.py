"""
One static website: assets, certificate, edge function and CloudFront.

This component serves one domain out of the shared hosting bucket. Files
under the website's local asset directory (if any) are uploaded below the
``<domain>/`` key prefix; CloudFront reads that prefix through a dedicated
Origin Access Identity (``origin_path`` is ``/<domain>``). An ACM certificate
covers the primary domain plus the alternates from
``compute_alternate_domains``, and the same names are the distribution
aliases.

Every request first runs ``edge/viewer_request.py`` as a Lambda@Edge
viewer-request function, and 403/404 origin errors are answered with
``/index.html`` and status 200 so client-side routed pages load on deep
links. Certificate DNS validation is left to the domain owner: the
validation records are exposed as ``certificate_validation``.
"""

import json
import os

import pulumi
import pulumi_aws as aws

from components._helpers import discover_assets, key_prefix, origin_path

ID: str = "hosting:aws:Website"

ORIGIN_ID = "hosting-bucket"
INDEX_PAGE = "/index.html"

# Origin errors answered with the index page (single-page app deep links).
FALLBACK_ERROR_CODES: tuple[int, ...] = (403, 404)

EDGE_SOURCE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "edge")
EDGE_HANDLER = "viewer_request.handler"
EDGE_RUNTIME = "python3.12"
# Viewer-request functions are capped at 5 seconds and 128 MB.
EDGE_TIMEOUT = 5
EDGE_MEMORY_SIZE = 128

EDGE_ASSUME_ROLE_POLICY: dict = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Effect": "Allow",
            "Principal": {
                "Service": ["lambda.amazonaws.com", "edgelambda.amazonaws.com"],
            },
            "Action": "sts:AssumeRole",
        }
    ],
}
BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


class Website(pulumi.ComponentResource):
    """
    Per-website resources on top of the shared hosting bucket.

    Resources: BucketObjectv2 per asset, OriginAccessIdentity, Certificate,
    Role + RolePolicyAttachment, Function (published), Distribution.
    """

    def __init__(
        self,
        name: str,
        domain_name: str,
        alternate_domains: list[str],
        bucket: aws.s3.Bucket,
        asset_dir: str | None = None,
    ):
        """
        Create the website's resources.

        Args:
            name: Pulumi resource name prefix for the website's resources.
            domain_name: Primary domain; also the key prefix in ``bucket``.
            alternate_domains: Output of compute_alternate_domains for this
                website; certificate SANs and extra distribution aliases.
            bucket: Shared hosting bucket.
            asset_dir: Local directory to upload; None skips the upload.

        Outputs (set on self, registered for the component):
            distribution_domain_name: CloudFront FQDN to point the domains at.
            certificate_validation: DNS records proving domain ownership.
            domains: Every alias the distribution answers to.
        """
        super().__init__(ID, name)

        # Child resources get parent=self so Pulumi groups them under the website
        # and destroys them with it.
        child_opts = pulumi.ResourceOptions(parent=self)

        # Primary first; CloudFront aliases and the exported domain list.
        self.domain_name = domain_name
        self.domains: list[str] = [domain_name, *alternate_domains]

        # Upload the site files below <domain>/ in the shared bucket.
        if asset_dir is not None:
            self._upload_assets(name, asset_dir, bucket, child_opts)

        # One identity per website so the bucket policy can scope each
        # distribution to its own prefix.
        self.origin_access_identity = aws.cloudfront.OriginAccessIdentity(
            resource_name=f"{name}-oai",
            comment=f"Allows CloudFront to reach {domain_name} in the hosting bucket",
            opts=child_opts,
        )

        # Validation itself happens outside this program; the distribution
        # cannot go live until certificate_validation records are published.
        self.certificate = aws.acm.Certificate(
            resource_name=f"{name}-certificate",
            domain_name=domain_name,
            subject_alternative_names=alternate_domains,
            validation_method="DNS",
            opts=child_opts,
        )

        # Viewer-request function rewriting directory URLs to index.html.
        self.edge_function = self._edge_function(name, child_opts)

        # The origin_path keeps this distribution inside its <domain>/ prefix.
        origins = [
            aws.cloudfront.DistributionOriginArgs(
                domain_name=bucket.bucket_regional_domain_name,
                origin_id=ORIGIN_ID,
                origin_path=origin_path(domain_name),
                s3_origin_config=aws.cloudfront.DistributionOriginS3OriginConfigArgs(
                    origin_access_identity=self.origin_access_identity.cloudfront_access_identity_path,
                ),
            )
        ]

        # ForwardedValues is required by the API when not using a cache policy.
        forwarded_values = aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
            query_string=False,
            cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                forward="none",
            ),
        )
        # qualified_arn points at the published version; Lambda@Edge rejects $LATEST.
        viewer_request = aws.cloudfront.DistributionDefaultCacheBehaviorLambdaFunctionAssociationArgs(
            event_type="viewer-request",
            lambda_arn=self.edge_function.qualified_arn,
            include_body=False,
        )
        # Static sites only need read methods; plain HTTP is redirected.
        default_cache_behavior = aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
            target_origin_id=ORIGIN_ID,
            viewer_protocol_policy="redirect-to-https",
            allowed_methods=["GET", "HEAD", "OPTIONS"],
            cached_methods=["GET", "HEAD"],
            compress=True,
            forwarded_values=forwarded_values,
            lambda_function_associations=[viewer_request],
        )

        # S3 answers 403 for missing keys (no ListBucket grant); serve the index
        # page instead so client-side routes resolve on deep links.
        custom_error_responses = [
            aws.cloudfront.DistributionCustomErrorResponseArgs(
                error_code=code,
                response_code=200,
                response_page_path=INDEX_PAGE,
            )
            for code in FALLBACK_ERROR_CODES
        ]

        # No geo restriction: every website is public.
        restrictions = aws.cloudfront.DistributionRestrictionsArgs(
            geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                restriction_type="none",
            ),
        )

        # SNI avoids the dedicated-IP charge; TLS 1.2 minimum.
        viewer_certificate = aws.cloudfront.DistributionViewerCertificateArgs(
            acm_certificate_arn=self.certificate.arn,
            ssl_support_method="sni-only",
            minimum_protocol_version="TLSv1.2_2021",
        )

        # Create the CloudFront distribution for the full domain set.
        self.distribution = aws.cloudfront.Distribution(
            resource_name=f"{name}-cdn",
            enabled=True,
            aliases=self.domains,
            origins=origins,
            default_cache_behavior=default_cache_behavior,
            custom_error_responses=custom_error_responses,
            restrictions=restrictions,
            viewer_certificate=viewer_certificate,
            opts=child_opts,
        )

        # Exposed so the stack can export them; DNS is managed outside this program.
        self.distribution_domain_name: pulumi.Output[str] = self.distribution.domain_name
        self.certificate_validation = self.certificate.domain_validation_options
        self.register_outputs(
            {
                "distribution_domain_name": self.distribution_domain_name,
                "certificate_validation": self.certificate_validation,
                "domains": self.domains,
            }
        )

    def _upload_assets(
        self,
        name: str,
        asset_dir: str,
        bucket: aws.s3.Bucket,
        opts: pulumi.ResourceOptions,
    ) -> None:
        assets = discover_assets(asset_dir)
        if not assets:
            pulumi.log.warn(f"no files found in {asset_dir}; nothing to upload", resource=self)
        prefix = key_prefix(self.domain_name)
        for asset in assets:
            aws.s3.BucketObjectv2(
                resource_name=f"{name}-asset-{asset.key}",
                bucket=bucket.id,
                key=f"{prefix}{asset.key}",
                source=pulumi.FileAsset(asset.path),
                content_type=asset.content_type,
                opts=opts,
            )

    def _edge_function(
        self,
        name: str,
        opts: pulumi.ResourceOptions,
    ) -> aws.lambda_.Function:
        role = aws.iam.Role(
            resource_name=f"{name}-edge-role",
            assume_role_policy=json.dumps(EDGE_ASSUME_ROLE_POLICY),
            opts=opts,
        )
        aws.iam.RolePolicyAttachment(
            resource_name=f"{name}-edge-logs",
            role=role.name,
            policy_arn=BASIC_EXECUTION_POLICY_ARN,
            opts=opts,
        )
        return aws.lambda_.Function(
            resource_name=f"{name}-viewer-request",
            runtime=EDGE_RUNTIME,
            handler=EDGE_HANDLER,
            role=role.arn,
            code=pulumi.FileArchive(EDGE_SOURCE_DIR),
            timeout=EDGE_TIMEOUT,
            memory_size=EDGE_MEMORY_SIZE,
            publish=True,
            opts=opts,
        )
