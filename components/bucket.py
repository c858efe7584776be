"""
Shared hosting bucket: one private S3 bucket, partitioned by domain.

Every website stores its files under ``<domain>/`` in this bucket. The bucket
is encrypted with S3-managed keys and fully blocked from public access;
CloudFront reads each prefix through that website's Origin Access Identity,
granted by a single bucket policy (``allow_origin_access``).
"""

import json
from typing import Sequence

import pulumi
import pulumi_aws as aws

from components._helpers import origin_read_policy

ID: str = "hosting:aws:HostingBucket"

# Always applied. Used by tests and callers to assert on secure defaults.
S3_BLOCK_PUBLIC_ACCESS: dict[str, bool] = {
    "block_public_acls": True,
    "block_public_policy": True,
    "ignore_public_acls": True,
    "restrict_public_buckets": True,
}


class HostingBucket(pulumi.ComponentResource):
    """
    Private, SSE-S3 encrypted bucket shared by all websites.

    Resources: Bucket, BucketServerSideEncryptionConfigurationV2,
    BucketPublicAccessBlock and, once ``allow_origin_access`` is called,
    BucketPolicy.
    """

    def __init__(
        self,
        name: str,
        bucket_name: str | pulumi.Output[str],
    ):
        """
        Create the bucket with encryption and Block Public Access.

        Args:
            name: Pulumi resource name for the bucket and related resources.
            bucket_name: Physical bucket name (see hosting_bucket_name).

        Outputs (set on self, registered for the component):
            bucket_id: Physical bucket name.
            bucket_arn: Bucket ARN.
        """
        super().__init__(ID, name)
        self._name = name

        child_opts = pulumi.ResourceOptions(parent=self)

        self.bucket = aws.s3.Bucket(
            resource_name=name,
            bucket=bucket_name,
            opts=child_opts,
        )

        aws.s3.BucketServerSideEncryptionConfigurationV2(
            resource_name=f"{name}-encryption",
            bucket=self.bucket.id,
            rules=[
                aws.s3.BucketServerSideEncryptionConfigurationV2RuleArgs(
                    apply_server_side_encryption_by_default=aws.s3.BucketServerSideEncryptionConfigurationV2RuleApplyServerSideEncryptionByDefaultArgs(
                        sse_algorithm="AES256",
                    ),
                )
            ],
            opts=child_opts,
        )

        self.public_access_block = aws.s3.BucketPublicAccessBlock(
            resource_name=f"{name}-block-public",
            bucket=self.bucket.id,
            opts=child_opts,
            **S3_BLOCK_PUBLIC_ACCESS,
        )

        self.bucket_id: pulumi.Output[str] = self.bucket.id
        self.bucket_arn: pulumi.Output[str] = self.bucket.arn
        self.register_outputs(
            {
                "bucket_id": self.bucket_id,
                "bucket_arn": self.bucket_arn,
            }
        )

    def allow_origin_access(
        self,
        grants: Sequence[tuple[pulumi.Output[str], str]],
    ) -> aws.s3.BucketPolicy:
        """
        Attach the bucket policy granting each website's OAI its own prefix.

        A bucket has exactly one policy, so this is called once with every
        website's (OAI IAM ARN, domain) pair.
        """
        domains = [domain for _, domain in grants]
        policy = pulumi.Output.all(
            self.bucket.arn, *[iam_arn for iam_arn, _ in grants]
        ).apply(
            lambda args: json.dumps(
                origin_read_policy(args[0], list(zip(args[1:], domains)))
            )
        )
        # Applying a policy while Block Public Access is still being set up
        # fails with AccessDenied.
        return aws.s3.BucketPolicy(
            resource_name=f"{self._name}-policy",
            bucket=self.bucket.id,
            policy=policy,
            opts=pulumi.ResourceOptions(
                parent=self,
                depends_on=[self.public_access_block],
            ),
        )
