"""Shared Pulumi mocks; installed before any component module is imported."""

import pulumi
import pytest

ACCOUNT_ID = "123456789012"


class HostingMocks(pulumi.runtime.Mocks):
    """Echo inputs back as state, fill in the computed outputs used, record resources."""

    def __init__(self):
        self.resources: list[tuple[str, str, dict]] = []

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        outputs = dict(args.inputs)
        if args.typ == "aws:s3/bucket:Bucket":
            outputs["arn"] = f"arn:aws:s3:::{args.inputs.get('bucket', args.name)}"
        elif args.typ == "aws:cloudfront/originAccessIdentity:OriginAccessIdentity":
            outputs["iamArn"] = f"arn:aws:iam::cloudfront:user/{args.name}"
        self.resources.append((args.typ, args.name, outputs))
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        if args.token == "aws:index/getCallerIdentity:getCallerIdentity":
            return {
                "accountId": ACCOUNT_ID,
                "arn": f"arn:aws:iam::{ACCOUNT_ID}:user/ci",
                "id": ACCOUNT_ID,
                "userId": "AIDACI",
            }
        return {}

    def of_type(self, typ: str) -> list[dict]:
        return [outputs for t, _, outputs in self.resources if t == typ]


_mocks = HostingMocks()
pulumi.runtime.set_mocks(_mocks, preview=False)


@pytest.fixture
def hosting_mocks():
    _mocks.resources.clear()
    return _mocks
