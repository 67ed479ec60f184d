"""AWS VPC implementation of NetkitNetwork."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import pulumi
import pulumi_aws as aws

from netkit_infra.components.network import (
    NatGatewayHandle,
    NatStrategy,
    NetworkOutputs,
    NetworkSpec,
    ProvisionedNetwork,
    SubnetSpec,
)
from netkit_infra.components.topology import TopologyBuilder

logger: logging.Logger = logging.getLogger(__name__)


def _tags(name: str, tags: Mapping[str, str]) -> dict[str, str]:
    return {"Name": name, **tags}


class AwsNetworkProvisioner:
    """Declares EC2 networking resources with ``pulumi_aws``.

    Every resource inherits ``opts``; pass ``parent`` there to nest the
    resources under a component.
    """

    def __init__(self, opts: pulumi.ResourceOptions | None = None) -> None:
        self._opts: pulumi.ResourceOptions = opts or pulumi.ResourceOptions()

    def _child_opts(self, depends_on: Sequence[Any] | None = None) -> pulumi.ResourceOptions:
        if not depends_on:
            return self._opts
        return pulumi.ResourceOptions.merge(
            self._opts, pulumi.ResourceOptions(depends_on=list(depends_on))
        )

    def create_network(
        self, name: str, cidr_block: str, tags: Mapping[str, str]
    ) -> aws.ec2.Vpc:
        return aws.ec2.Vpc(
            name,
            aws.ec2.VpcArgs(
                cidr_block=cidr_block,
                enable_dns_support=True,
                enable_dns_hostnames=True,
                tags=_tags(name, tags),
            ),
            opts=self._child_opts(),
        )

    def create_subnet(
        self,
        name: str,
        network: aws.ec2.Vpc,
        cidr_block: str,
        availability_zone: str,
        auto_assign_public_ip: bool,
        tags: Mapping[str, str],
    ) -> aws.ec2.Subnet:
        return aws.ec2.Subnet(
            name,
            aws.ec2.SubnetArgs(
                vpc_id=network.id,
                cidr_block=cidr_block,
                availability_zone=availability_zone,
                map_public_ip_on_launch=auto_assign_public_ip,
                tags=_tags(name, tags),
            ),
            opts=self._child_opts(),
        )

    def create_internet_gateway(
        self, name: str, network: aws.ec2.Vpc, tags: Mapping[str, str]
    ) -> aws.ec2.InternetGateway:
        return aws.ec2.InternetGateway(
            name,
            aws.ec2.InternetGatewayArgs(vpc_id=network.id, tags=_tags(name, tags)),
            opts=self._child_opts(),
        )

    def lookup_main_route_table(self, network: aws.ec2.Vpc) -> pulumi.Output[str]:
        """Return the ID of the route table AWS created alongside the VPC."""
        result = aws.ec2.get_route_table_output(
            vpc_id=network.id,
            filters=[
                aws.ec2.GetRouteTableFilterArgs(name="association.main", values=["true"]),
            ],
        )
        return result.apply(lambda route_table: route_table.id)

    def create_route_table(
        self, name: str, network: aws.ec2.Vpc, tags: Mapping[str, str]
    ) -> aws.ec2.RouteTable:
        return aws.ec2.RouteTable(
            name,
            aws.ec2.RouteTableArgs(vpc_id=network.id, tags=_tags(name, tags)),
            opts=self._child_opts(),
        )

    def create_route(
        self,
        name: str,
        route_table: aws.ec2.RouteTable | pulumi.Output[str],
        destination_cidr: str,
        target: aws.ec2.InternetGateway | NatGatewayHandle,
    ) -> aws.ec2.Route:
        if isinstance(target, NatGatewayHandle):
            args = aws.ec2.RouteArgs(
                route_table_id=_route_table_id(route_table),
                destination_cidr_block=destination_cidr,
                nat_gateway_id=target.resource.id,
            )
        else:
            args = aws.ec2.RouteArgs(
                route_table_id=_route_table_id(route_table),
                destination_cidr_block=destination_cidr,
                gateway_id=target.id,
            )
        return aws.ec2.Route(name, args, opts=self._child_opts())

    def associate_route_table(
        self,
        name: str,
        subnet: aws.ec2.Subnet,
        route_table: aws.ec2.RouteTable | pulumi.Output[str],
    ) -> aws.ec2.RouteTableAssociation:
        return aws.ec2.RouteTableAssociation(
            name,
            aws.ec2.RouteTableAssociationArgs(
                subnet_id=subnet.id,
                route_table_id=_route_table_id(route_table),
            ),
            opts=self._child_opts(),
        )

    def allocate_elastic_ip(self, name: str, tags: Mapping[str, str]) -> aws.ec2.Eip:
        return aws.ec2.Eip(
            name,
            aws.ec2.EipArgs(domain="vpc", tags=_tags(name, tags)),
            opts=self._child_opts(),
        )

    def create_nat_gateway(
        self,
        name: str,
        subnet: aws.ec2.Subnet,
        elastic_ip: aws.ec2.Eip,
        tags: Mapping[str, str],
        depends_on: Sequence[Any] | None = None,
    ) -> aws.ec2.NatGateway:
        return aws.ec2.NatGateway(
            name,
            aws.ec2.NatGatewayArgs(
                subnet_id=subnet.id,
                allocation_id=elastic_ip.id,
                tags=_tags(name, tags),
            ),
            opts=self._child_opts(depends_on),
        )


def _route_table_id(
    route_table: aws.ec2.RouteTable | pulumi.Output[str],
) -> pulumi.Output[str]:
    if isinstance(route_table, aws.ec2.RouteTable):
        return route_table.id
    return route_table


class AwsNetworkArgs:
    """Arguments for the AWS network component.

    Args:
        cidr_block: CIDR of the VPC.
        subnets: Subnets to create, in order.
        nat_strategy: NAT egress strategy for private subnets.
        tags: Tags applied to every taggable resource.
    """

    def __init__(
        self,
        cidr_block: str,
        subnets: Sequence[SubnetSpec],
        nat_strategy: NatStrategy | str | None = NatStrategy.NONE,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        self.cidr_block: str = cidr_block
        self.subnets: list[SubnetSpec] = list(subnets)
        self.nat_strategy: NatStrategy | str | None = nat_strategy
        self.tags: dict[str, str] = dict(tags or {})

    @classmethod
    def from_spec(cls, spec: NetworkSpec) -> AwsNetworkArgs:
        return cls(
            cidr_block=spec.cidr_block,
            subnets=spec.subnets,
            nat_strategy=spec.nat_strategy,
            tags=spec.tags,
        )

    def to_spec(self) -> NetworkSpec:
        return NetworkSpec(
            cidr_block=self.cidr_block,
            subnets=self.subnets,
            nat_strategy=self.nat_strategy,
            tags=self.tags,
        )


def create_network(
    name: str,
    args: AwsNetworkArgs,
    opts: pulumi.ResourceOptions | None = None,
) -> ProvisionedNetwork:
    """Declare a VPC topology without wrapping it in a component resource.

    Args:
        name: Prefix for every logical resource name.
        args: Network arguments.
        opts: Options inherited by every declared resource.

    Raises:
        NetworkConfigError: ``args`` describe an inconsistent network.
        NetworkProvisionError: A resource could not be declared.
    """
    return TopologyBuilder(name, AwsNetworkProvisioner(opts)).build(args.to_spec())


def network_outputs(topology: ProvisionedNetwork) -> NetworkOutputs:
    """Project a provisioned topology onto its resource IDs."""
    return NetworkOutputs(
        vpc_id=topology.network.id,
        public_subnet_ids=[s.resource.id for s in topology.public_subnets],
        private_subnet_ids=[s.resource.id for s in topology.private_subnets],
        nat_gateway_ids=[gw.resource.id for gw in topology.nat_gateways],
    )


class AwsNetwork(pulumi.ComponentResource):
    """AWS VPC + subnets + IGW + NAT Gateways satisfying ``NetkitNetwork``.

    Public subnets route through a single internet gateway on the VPC's main
    route table. Private subnets get dedicated route tables pointing at NAT
    gateways according to ``args.nat_strategy``.
    """

    def __init__(
        self,
        name: str,
        args: AwsNetworkArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("netkit:aws:Network", name, {}, opts)

        logger.debug(
            "provisioning_aws_network",
            extra={"resource_name": name, "nat_strategy": str(args.nat_strategy)},
        )

        self._topology: ProvisionedNetwork = create_network(
            name, args, opts=pulumi.ResourceOptions(parent=self)
        )
        self._outputs: NetworkOutputs = network_outputs(self._topology)

        self.register_outputs(
            {
                "vpc_id": self._outputs.vpc_id,
                "public_subnet_ids": self._outputs.public_subnet_ids,
                "private_subnet_ids": self._outputs.private_subnet_ids,
                "nat_gateway_ids": self._outputs.nat_gateway_ids,
            }
        )

    @property
    def topology(self) -> ProvisionedNetwork:
        """Return every resource declared for this network."""
        return self._topology

    @property
    def outputs(self) -> NetworkOutputs:
        """Return the resolved network outputs."""
        return self._outputs
