"""Typed configuration loaded from environment variables at startup."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from netkit_infra.components.network import NatStrategy, NetworkSpec, SubnetKind, SubnetSpec

logger: logging.Logger = logging.getLogger(__name__)


class CloudProvider(StrEnum):
    """Supported cloud provider deployment targets."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class SubnetSettings(BaseModel):
    kind: SubnetKind
    availability_zone: str
    cidr_block: str


def _default_subnets() -> list[SubnetSettings]:
    return [
        SubnetSettings(kind=SubnetKind.PUBLIC, availability_zone="us-west-2a", cidr_block="10.0.1.0/24"),
        SubnetSettings(kind=SubnetKind.PUBLIC, availability_zone="us-west-2b", cidr_block="10.0.2.0/24"),
        SubnetSettings(kind=SubnetKind.PRIVATE, availability_zone="us-west-2a", cidr_block="10.0.10.0/24"),
        SubnetSettings(kind=SubnetKind.PRIVATE, availability_zone="us-west-2b", cidr_block="10.0.20.0/24"),
    ]


class StackConfig(BaseSettings):
    """Fully validated infrastructure stack configuration.

    All values are sourced from environment variables at startup.
    ``NETKIT_SUBNETS`` and ``NETKIT_TAGS`` are JSON encoded.
    Raises ``ValidationError`` on missing or invalid values.
    """

    model_config = SettingsConfigDict(
        env_prefix="NETKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    cloud_provider: CloudProvider
    network_name: str = "netkit-network"
    cidr_block: str = "10.0.0.0/16"
    nat_strategy: NatStrategy = NatStrategy.NONE
    subnets: list[SubnetSettings] = Field(default_factory=_default_subnets)
    tags: dict[str, str] = Field(default_factory=dict)
    environment: Literal["prod", "staging", "dev"] = "prod"

    @classmethod
    def load(cls) -> StackConfig:
        """Load and validate configuration from the environment.

        Logs each resolved setting at DEBUG level.
        Raises ``pydantic.ValidationError`` on missing or invalid values.
        """
        config = cls()  # type: ignore[call-arg]  # env vars supply required fields
        logger.debug(
            "stack_config_loaded",
            extra={
                "cloud_provider": config.cloud_provider.value,
                "nat_strategy": config.nat_strategy.value,
                "subnet_count": len(config.subnets),
                "environment": config.environment,
            },
        )
        return config

    def to_network_spec(self) -> NetworkSpec:
        """Build the network spec, tagging resources with the environment."""
        tags = {"Environment": self.environment, **self.tags}
        return NetworkSpec(
            cidr_block=self.cidr_block,
            subnets=[
                SubnetSpec(
                    kind=subnet.kind,
                    availability_zone=subnet.availability_zone,
                    cidr_block=subnet.cidr_block,
                )
                for subnet in self.subnets
            ],
            nat_strategy=self.nat_strategy,
            tags=tags,
        )
