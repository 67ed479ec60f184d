"""Consistency checks run on a ``NetworkSpec`` before anything is declared."""

from __future__ import annotations

import logging

from netkit_infra.components.errors import (
    EmptySubnetListError,
    MissingPublicSubnetError,
    UnsupportedNatStrategyError,
)
from netkit_infra.components.network import NatStrategy, NetworkSpec, SubnetKind

logger: logging.Logger = logging.getLogger(__name__)

NAT_STRATEGIES_REQUIRING_PUBLIC_SUBNET: tuple[NatStrategy, ...] = (
    NatStrategy.SINGLE,
    NatStrategy.ONE_PER_AZ,
)


def validate_network_spec(spec: NetworkSpec) -> None:
    """Raise a ``NetworkConfigError`` if ``spec`` cannot be built.

    The NAT strategy is checked before the subnet list, so an empty list
    combined with a NAT strategy reports ``MissingPublicSubnetError``.
    """
    strategy = spec.nat_strategy
    if strategy not in tuple(NatStrategy):
        raise UnsupportedNatStrategyError(strategy)

    if strategy in NAT_STRATEGIES_REQUIRING_PUBLIC_SUBNET and not any(
        subnet.kind == SubnetKind.PUBLIC for subnet in spec.subnets
    ):
        raise MissingPublicSubnetError(strategy)

    if not spec.subnets:
        raise EmptySubnetListError()

    logger.debug(
        "network_spec_validated",
        extra={
            "nat_strategy": str(strategy),
            "subnet_count": len(spec.subnets),
        },
    )
