"""Tests for the stack entrypoint under Pulumi mocks"""

import importlib.util
import json
from pathlib import Path

import pulumi
import pytest


ENTRYPOINT = Path(__file__).resolve().parent.parent / "__main__.py"
BUCKET_NAME = "123456789012-us-east-1-hosting"


def _load_entrypoint():
    spec = importlib.util.spec_from_file_location("hosting_entrypoint", ENTRYPOINT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def stack(tmp_path, hosting_mocks, monkeypatch):
    """Configure two websites, run main() and return (mocks, exports)."""
    (tmp_path / "example.org").mkdir()
    (tmp_path / "example.org" / "index.html").write_text("<html></html>")
    websites = [
        {
            "name": "ExampleOrg",
            "domain_name": "example.org",
            "deployment": True,
            "alternative_domain_names": ["example.com"],
        },
        {"name": "ExampleDev", "domain_name": "example.dev", "deployment": False},
    ]
    for key, value in [
        ("project:project_name", "hosting"),
        ("project:environment", "test"),
        ("project:assets_dir", str(tmp_path)),
        ("project:websites", json.dumps(websites)),
        ("aws:region", "us-east-1"),
    ]:
        pulumi.runtime.set_config(key, value)

    exports = {}
    monkeypatch.setattr(pulumi, "export", lambda name, value: exports.__setitem__(name, value))
    entrypoint = _load_entrypoint()

    @pulumi.runtime.test
    def run():
        entrypoint.main()

    run()
    return hosting_mocks, exports


class TestMain:
    def test_exports_per_website(self, stack):
        _, exports = stack
        assert set(exports) == {
            "bucket_name",
            "ExampleOrg_distribution_domain",
            "ExampleOrg_certificate_validation",
            "ExampleOrg_domains",
            "ExampleDev_distribution_domain",
            "ExampleDev_certificate_validation",
            "ExampleDev_domains",
        }
        assert exports["ExampleDev_domains"] == ["example.dev", "www.example.dev"]

    def test_bucket_named_after_account_and_region(self, stack):
        mocks, _ = stack
        buckets = mocks.of_type("aws:s3/bucket:Bucket")
        assert [b["bucket"] for b in buckets] == [BUCKET_NAME]

    def test_one_distribution_per_website(self, stack):
        mocks, _ = stack
        aliases = [d["aliases"] for d in mocks.of_type("aws:cloudfront/distribution:Distribution")]
        assert sorted(aliases) == [
            ["example.dev", "www.example.dev"],
            ["example.org", "example.com", "www.example.org", "www.example.com"],
        ]

    def test_single_policy_grants_every_prefix(self, stack):
        mocks, _ = stack
        policies = mocks.of_type("aws:s3/bucketPolicy:BucketPolicy")
        assert len(policies) == 1
        statements = json.loads(policies[0]["policy"])["Statement"]
        assert [s["Resource"] for s in statements] == [
            f"arn:aws:s3:::{BUCKET_NAME}/example.org/*",
            f"arn:aws:s3:::{BUCKET_NAME}/example.dev/*",
        ]
        assert len({s["Principal"]["AWS"] for s in statements}) == 2

    def test_only_deployed_website_uploads(self, stack):
        mocks, _ = stack
        keys = [o["key"] for o in mocks.of_type("aws:s3/bucketObjectv2:BucketObjectv2")]
        assert keys == ["example.org/index.html"]
