"""Maps a ``NetworkSpec`` onto gateways, route tables and associations.

The builder never talks to a cloud API itself. It drives a
``NetworkProvisioner`` in a fixed order (network, subnets in input order,
then NAT infrastructure) and records what it declared in a
``ProvisionedNetwork``. Handles returned by the provisioner are passed
straight into later calls, so the engine behind it sees every dependency
edge without the builder waiting on anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from netkit_infra.components.errors import (
    NetworkError,
    NoPublicSubnetError,
    ResourceCreationError,
    UnsupportedNatStrategyError,
    UnsupportedSubnetKindError,
)
from netkit_infra.components.network import (
    DEFAULT_ROUTE_CIDR,
    NatGatewayHandle,
    NatStrategy,
    NetworkProvisioner,
    NetworkSpec,
    ProvisionedNetwork,
    ProvisionedSubnet,
    RouteWiring,
    SubnetKind,
)
from netkit_infra.components.validation import validate_network_spec

logger: logging.Logger = logging.getLogger(__name__)


@contextmanager
def _provisioning_step(step: str, resource_name: str | None = None) -> Iterator[None]:
    """Re-raise provisioner failures as ``ResourceCreationError``."""
    try:
        yield
    except NetworkError:
        raise
    except Exception as exc:
        logger.error(
            "provisioning_step_failed",
            extra={"step": step, "resource_name": resource_name, "error": repr(exc)},
        )
        raise ResourceCreationError(step, resource_name) from exc


class TopologyBuilder:
    """Builds one network through a provisioner.

    Args:
        name: Prefix for every logical resource name.
        provisioner: Backend that declares the resources.
    """

    def __init__(self, name: str, provisioner: NetworkProvisioner) -> None:
        self._name: str = name
        self._provisioner: NetworkProvisioner = provisioner

    def build(self, spec: NetworkSpec) -> ProvisionedNetwork:
        """Validate ``spec`` and declare the whole topology in one pass."""
        validate_network_spec(spec)
        logger.info(
            "network_build_started",
            extra={
                "network_name": self._name,
                "nat_strategy": str(spec.nat_strategy),
                "subnet_count": len(spec.subnets),
            },
        )

        vpc_name = f"{self._name}-vpc"
        with _provisioning_step("create_network", vpc_name):
            network = self._provisioner.create_network(vpc_name, spec.cidr_block, spec.tags)

        topology = self.provision_subnets(network, spec)
        topology.nat_gateways, topology.private_routes = self.provision_nat(
            network,
            topology.subnets,
            spec.nat_strategy,
            spec.tags,
            internet_gateway=topology.internet_gateway,
        )

        logger.info(
            "network_build_completed",
            extra={
                "network_name": self._name,
                "public_subnets": len(topology.public_subnets),
                "private_subnets": len(topology.private_subnets),
                "nat_gateways": len(topology.nat_gateways),
                "private_route_tables": len(topology.private_routes),
            },
        )
        return topology

    def provision_subnets(self, network: Any, spec: NetworkSpec) -> ProvisionedNetwork:
        """Declare every subnet in input order and route public ones to the IGW.

        The internet gateway is created on the first public subnet and
        reused for the rest; it stays ``None`` when every subnet is private.
        """
        internet_gateway: Any | None = None
        subnets: list[ProvisionedSubnet] = []
        public_routes: list[RouteWiring] = []

        for index, subnet_spec in enumerate(spec.subnets):
            kind = subnet_spec.kind
            if kind not in tuple(SubnetKind):
                raise UnsupportedSubnetKindError(kind)

            az = subnet_spec.availability_zone
            subnet_name = f"{self._name}-{kind}-subnet-{index}-{az}"
            with _provisioning_step("create_subnet", subnet_name):
                resource = self._provisioner.create_subnet(
                    subnet_name,
                    network,
                    subnet_spec.cidr_block,
                    az,
                    kind == SubnetKind.PUBLIC,
                    spec.tags,
                )
            subnet = ProvisionedSubnet(spec=subnet_spec, resource=resource, index=index)
            subnets.append(subnet)
            logger.debug(
                "subnet_declared",
                extra={"resource_name": subnet_name, "kind": str(kind), "availability_zone": az},
            )

            if kind == SubnetKind.PUBLIC:
                if internet_gateway is None:
                    internet_gateway = self._create_internet_gateway(network, spec.tags)
                public_routes.append(
                    self._route_to_internet(network, subnet, internet_gateway)
                )

        return ProvisionedNetwork(
            network=network,
            subnets=subnets,
            internet_gateway=internet_gateway,
            public_routes=public_routes,
        )

    def provision_nat(
        self,
        network: Any,
        subnets: Sequence[ProvisionedSubnet],
        nat_strategy: NatStrategy | str | None,
        tags: Mapping[str, str],
        internet_gateway: Any | None = None,
    ) -> tuple[list[NatGatewayHandle], list[RouteWiring]]:
        """Declare NAT gateways and private route tables for ``nat_strategy``.

        ``ONE_PER_AZ`` creates one gateway per public subnet and then one
        route table per (private subnet, gateway) pair. Private subnets are
        not matched to the gateway in their own availability zone, and a
        private subnet with several route tables keeps whichever
        association the provider applies last.
        """
        strategy = NatStrategy.NONE if nat_strategy is None else nat_strategy
        if strategy == NatStrategy.NONE:
            return [], []

        public_subnets = [s for s in subnets if s.kind == SubnetKind.PUBLIC]
        if strategy == NatStrategy.SINGLE:
            if not public_subnets:
                raise NoPublicSubnetError(strategy)
            anchors = public_subnets[:1]
        elif strategy == NatStrategy.ONE_PER_AZ:
            if not public_subnets:
                raise NoPublicSubnetError(strategy)
            anchors = public_subnets
        else:
            raise UnsupportedNatStrategyError(strategy)

        nat_gateways = [
            self._create_nat_gateway(anchor, tags, internet_gateway) for anchor in anchors
        ]
        private_routes = [
            self._route_to_nat(network, subnet, nat_gateway, tags)
            for subnet in subnets
            if subnet.kind == SubnetKind.PRIVATE
            for nat_gateway in nat_gateways
        ]
        return nat_gateways, private_routes

    def _create_internet_gateway(self, network: Any, tags: Mapping[str, str]) -> Any:
        name = f"{self._name}-internet-gateway"
        with _provisioning_step("create_internet_gateway", name):
            gateway = self._provisioner.create_internet_gateway(name, network, tags)
        logger.debug("internet_gateway_declared", extra={"resource_name": name})
        return gateway

    def _route_to_internet(
        self, network: Any, subnet: ProvisionedSubnet, internet_gateway: Any
    ) -> RouteWiring:
        suffix = f"{subnet.index}-{subnet.availability_zone}"
        with _provisioning_step("lookup_main_route_table"):
            route_table = self._provisioner.lookup_main_route_table(network)

        route_name = f"{self._name}-public-route-{suffix}"
        with _provisioning_step("create_route", route_name):
            route = self._provisioner.create_route(
                route_name, route_table, DEFAULT_ROUTE_CIDR, internet_gateway
            )

        association_name = f"{self._name}-public-rta-{suffix}"
        with _provisioning_step("associate_route_table", association_name):
            association = self._provisioner.associate_route_table(
                association_name, subnet.resource, route_table
            )

        return RouteWiring(
            subnet=subnet,
            route_table=route_table,
            route=route,
            association=association,
            target=internet_gateway,
        )

    def _create_nat_gateway(
        self,
        subnet: ProvisionedSubnet,
        tags: Mapping[str, str],
        internet_gateway: Any | None,
    ) -> NatGatewayHandle:
        suffix = f"{subnet.index}-{subnet.availability_zone}"

        eip_name = f"{self._name}-eip-{suffix}"
        with _provisioning_step("allocate_elastic_ip", eip_name):
            elastic_ip = self._provisioner.allocate_elastic_ip(eip_name, tags)

        nat_name = f"{self._name}-nat-gateway-{suffix}"
        depends_on = [internet_gateway] if internet_gateway is not None else None
        with _provisioning_step("create_nat_gateway", nat_name):
            resource = self._provisioner.create_nat_gateway(
                nat_name, subnet.resource, elastic_ip, tags, depends_on=depends_on
            )

        logger.info(
            "nat_gateway_declared",
            extra={"resource_name": nat_name, "availability_zone": subnet.availability_zone},
        )
        return NatGatewayHandle(resource=resource, elastic_ip=elastic_ip, subnet=subnet)

    def _route_to_nat(
        self,
        network: Any,
        subnet: ProvisionedSubnet,
        nat_gateway: NatGatewayHandle,
        tags: Mapping[str, str],
    ) -> RouteWiring:
        suffix = f"{subnet.index}-{subnet.availability_zone}-nat-{nat_gateway.subnet.index}"

        route_table_name = f"{self._name}-private-rt-{suffix}"
        with _provisioning_step("create_route_table", route_table_name):
            route_table = self._provisioner.create_route_table(route_table_name, network, tags)

        route_name = f"{self._name}-private-route-{suffix}"
        with _provisioning_step("create_route", route_name):
            route = self._provisioner.create_route(
                route_name, route_table, DEFAULT_ROUTE_CIDR, nat_gateway
            )

        association_name = f"{self._name}-private-rta-{suffix}"
        with _provisioning_step("associate_route_table", association_name):
            association = self._provisioner.associate_route_table(
                association_name, subnet.resource, route_table
            )

        return RouteWiring(
            subnet=subnet,
            route_table=route_table,
            route=route,
            association=association,
            target=nat_gateway,
        )


def build_network(
    spec: NetworkSpec,
    provisioner: NetworkProvisioner,
    name: str = "network",
) -> ProvisionedNetwork:
    """Validate ``spec`` and declare its topology through ``provisioner``."""
    return TopologyBuilder(name, provisioner).build(spec)
