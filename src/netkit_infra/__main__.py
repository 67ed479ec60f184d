"""Pulumi stack entry point for netkit infrastructure."""

from __future__ import annotations

import logging

import pulumi
import structlog

from netkit_infra.config import CloudProvider, StackConfig
from netkit_infra.providers.aws.network import AwsNetwork, AwsNetworkArgs

logger: logging.Logger = logging.getLogger(__name__)


class NetkitStack:
    """Builds the configured network on the selected cloud provider."""

    def __init__(self, config: StackConfig) -> None:
        """Initialise the stack with resolved configuration."""
        self._config: StackConfig = config

    def run(self) -> None:
        """Provision the network and export its identifiers."""
        logger.info(
            "stack_run_started",
            extra={
                "cloud_provider": self._config.cloud_provider.value,
                "nat_strategy": self._config.nat_strategy.value,
            },
        )
        if self._config.cloud_provider == CloudProvider.AWS:
            self._run_aws()
        else:
            raise NotImplementedError(
                f"Provider '{self._config.cloud_provider}' not yet implemented."
            )

    def _run_aws(self) -> None:
        config = self._config

        network = AwsNetwork(
            config.network_name,
            AwsNetworkArgs.from_spec(config.to_network_spec()),
        )

        pulumi.export("vpc_id", network.outputs.vpc_id)
        pulumi.export("public_subnet_ids", network.outputs.public_subnet_ids)
        pulumi.export("private_subnet_ids", network.outputs.private_subnet_ids)
        pulumi.export("nat_gateway_ids", network.outputs.nat_gateway_ids)


if __name__ == "__main__":
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.INFO))
    NetkitStack(config=StackConfig.load()).run()
