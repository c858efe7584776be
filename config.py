"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. All settings are read from
Pulumi config (e.g. Pulumi.<stack>.yaml or pulumi config set). Every key is
required. The whole configuration is validated here, before __main__.main()
declares any resource, so a bad website entry aborts the run with nothing
applied.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pulumi

from components._helpers import compute_alternate_domains, is_valid_domain

# Lambda@Edge functions and CloudFront certificates must live in us-east-1.
EDGE_REGION = "us-east-1"


class ConfigError(ValueError):
    """Stack configuration is invalid; raised before any resource is declared."""


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class WebsiteSpec:
    """
    One static website served from the shared bucket.

    Attributes:
        name: Unique identifier; namespaces the website's Pulumi resources.
        domain_name: Primary domain; also the object key prefix in the bucket.
        deployment: Whether <assets_dir>/<domain_name> is uploaded.
        alternative_domain_names: Extra hostnames, in configured order.
    """

    name: str
    domain_name: str
    deployment: bool
    alternative_domain_names: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: dict) -> "WebsiteSpec":
        """Build a WebsiteSpec from one entry of the ``websites`` config list."""
        try:
            return cls(
                name=str(raw["name"]),
                domain_name=str(raw["domain_name"]),
                deployment=_as_bool(raw["deployment"]),
                alternative_domain_names=tuple(
                    str(domain) for domain in raw.get("alternative_domain_names") or ()
                ),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ConfigError(f"malformed website entry {raw!r}: {exc}") from exc

    def alternate_domains(self) -> list[str]:
        """Certificate SANs and extra aliases, derived www variants included."""
        return compute_alternate_domains(self.domain_name, self.alternative_domain_names)

    def domain_set(self) -> list[str]:
        """Every hostname this website answers to, primary first."""
        return [self.domain_name, *self.alternate_domains()]


def _require_str(config: pulumi.Config, key: str) -> str:
    return config.require(key)


def _require_websites(config: pulumi.Config, key: str) -> tuple[WebsiteSpec, ...]:
    raw = config.require_object(key)
    if not isinstance(raw, list):
        raise ConfigError(f"{key} must be a list of website entries")
    return tuple(WebsiteSpec.from_dict(entry) for entry in raw)


# (key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, Callable[[pulumi.Config, str], Any]]] = [
    ("project_name", _require_str),
    ("environment", _require_str),
    ("assets_dir", _require_str),
    ("websites", _require_websites),
]


def validate_websites(websites: tuple[WebsiteSpec, ...]) -> None:
    """
    Reject configurations that cannot be provisioned as a whole.

    Raises:
        ConfigError: on an empty list, duplicate names, malformed domains, a
            primary listed among its own alternates, or a hostname claimed by
            two websites (CloudFront aliases are globally unique).
    """
    if not websites:
        raise ConfigError("at least one website must be configured")

    names: set[str] = set()
    owners: dict[str, str] = {}
    for website in websites:
        if not website.name:
            raise ConfigError(f"website for {website.domain_name!r} has an empty name")
        if website.name in names:
            raise ConfigError(f"duplicate website name {website.name!r}")
        names.add(website.name)

        for domain in (website.domain_name, *website.alternative_domain_names):
            if not is_valid_domain(domain):
                raise ConfigError(f"website {website.name!r}: malformed domain {domain!r}")
        if website.domain_name in website.alternative_domain_names:
            raise ConfigError(
                f"website {website.name!r}: primary domain {website.domain_name!r} "
                "is listed as its own alternative"
            )

        for domain in website.domain_set():
            owner = owners.setdefault(domain, website.name)
            if owner != website.name:
                raise ConfigError(
                    f"domain {domain!r} is claimed by both {owner!r} and {website.name!r}"
                )


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        project_name: Project name used in resource naming (required).
        environment: Environment label used in resource naming (required).
        assets_dir: Directory holding one sub-directory per deployed domain (required).
        websites: Websites to host, in configured order (required).
        region: AWS region of the stack; always EDGE_REGION once validated.
    """

    project_name: str
    environment: str
    assets_dir: str
    websites: tuple[WebsiteSpec, ...]
    region: str = EDGE_REGION

    @classmethod
    def from_pulumi_config(
        cls,
        config: pulumi.Config,
        aws_config: pulumi.Config,
    ) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config() and pulumi.Config("aws").

        All keys in _CONFIG_SPEC are required, ``aws:region`` must be
        EDGE_REGION and every deployed website needs its asset directory.

        Raises:
            ConfigError: if any validation fails.
        """
        kwargs = {key: parser(config, key) for key, parser in _CONFIG_SPEC}
        region = aws_config.require("region")
        if region != EDGE_REGION:
            raise ConfigError(
                f"aws:region must be {EDGE_REGION} (Lambda@Edge and CloudFront "
                f"certificates), got {region!r}"
            )
        stack_config = cls(region=region, **kwargs)
        validate_websites(stack_config.websites)
        for website in stack_config.websites:
            if website.deployment and not Path(stack_config.asset_dir(website)).is_dir():
                raise ConfigError(
                    f"website {website.name!r}: asset directory "
                    f"{stack_config.asset_dir(website)!r} does not exist"
                )
        return stack_config

    def asset_dir(self, website: WebsiteSpec) -> str:
        """Local directory uploaded for ``website``, e.g. 'domains/example.org'."""
        return str(Path(self.assets_dir) / website.domain_name)
