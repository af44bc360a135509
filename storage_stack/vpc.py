"""VPC, subnets and route tables"""
import pulumi
from pulumi_aws import ec2

from storage_stack.components import Component, resource_options

PRIVATE_SUBNET_INCREMENTOR = 16


class AwsVpc(Component):
    attributes = {'vpc_id': 'vpc.id'}

    def __init__(self, **kwargs):
        self.environment = kwargs.get('environment')
        self.root_tag_name = kwargs.get('root_tag_name')
        self.root_resource_name = kwargs.get('root_resource_name')
        self.vpc_cidr = kwargs.get('vpc_cidr')
        self.protect_resources = kwargs.get('protect_resources')
        self.removal_policy = kwargs.get('removal_policy')
        self.vpc_cidr_octet_prefix = '.'.join(self.vpc_cidr.split('.')[:2])
        self.public_subnets = {}
        self.private_subnets = {}
        self.nat_gateways = {}
        self.vpc = ec2.Vpc(
            f'{self.root_resource_name}-vpc',
            cidr_block=self.vpc_cidr,
            instance_tenancy='default',
            enable_dns_hostnames=True,
            enable_dns_support=True,
            opts=self._opts(),
            tags={
                'Name': f'{self.root_tag_name} VPC {self.environment}'
            }
        )
        self.internet_gateway = ec2.InternetGateway(
            f'{self.root_resource_name}-ig',
            vpc_id=self.vpc.id,
            opts=self._opts(),
            tags={
                'Name': f'{self.root_tag_name} Internet Gateway {self.environment}'
            }
        )

    def _opts(self, **kwargs):
        return resource_options(self.protect_resources, self.removal_policy, **kwargs)

    @property
    def public_subnet_ids(self):
        return [subnet.id for subnet in self.public_subnets.values()]

    @property
    def private_subnet_ids(self):
        return [subnet.id for subnet in self.private_subnets.values()]

    def create_subnet(self, az, third_octet, public=True):
        subnet_use = 'public' if public else 'private'
        subnet = ec2.Subnet(
            f'{self.root_resource_name}-{subnet_use}-subnet-{az}',
            vpc_id=self.vpc.id,
            availability_zone=az,
            map_public_ip_on_launch=public,
            cidr_block=f'{self.vpc_cidr_octet_prefix}.{third_octet}.0/24',
            opts=self._opts(),
            tags={
                'Name': f'{self.root_tag_name} {subnet_use.capitalize()} Subnet {az} {self.environment}'
            }
        )
        if public:
            route = ec2.RouteTableRouteArgs(cidr_block='0.0.0.0/0', gateway_id=self.internet_gateway.id)
        elif az in self.nat_gateways:
            route = ec2.RouteTableRouteArgs(cidr_block='0.0.0.0/0', nat_gateway_id=self.nat_gateways[az]['nat_gateway'].id)
        else:
            route = None

        route_table = ec2.RouteTable(
            f'{self.root_resource_name}-{subnet_use}-route-table-{az}',
            vpc_id=self.vpc.id,
            routes=[route] if route else [],
            opts=self._opts(),
            tags={
                'Name': f'{self.root_tag_name} {subnet_use.capitalize()} route table {az} {self.environment}'
            },
        )
        subnet_assn = ec2.RouteTableAssociation(
            f'{self.root_resource_name}-{subnet_use}-subnet-association-{az}',
            subnet_id=subnet.id,
            route_table_id=route_table.id,
            opts=self._opts()
        )
        if public:
            self.public_subnets[az] = subnet
        else:
            self.private_subnets[az] = subnet
        return subnet, route_table, subnet_assn

    def create_nat_gateway(self, az):
        nat_eip = ec2.Eip(
            f'{self.root_resource_name}-nat-eip-{az}',
            domain='vpc',
            tags={
                'Name': f'{self.root_tag_name} NAT EIP {az} {self.environment}'
            },
            opts=self._opts()
        )
        nat_gateway = ec2.NatGateway(
            f'{self.root_resource_name}-nat-gateway-{az}',
            allocation_id=nat_eip.id,
            subnet_id=self.public_subnets[az].id,
            tags={
                'Name': f'{self.root_tag_name} NAT Gateway {az} {self.environment}'
            },
            opts=self._opts(depends_on=[self.internet_gateway])
        )
        self.nat_gateways[az] = {
            'eip': nat_eip,
            'nat_gateway': nat_gateway
        }
        return self.nat_gateways[az]

    def create_security_group(self, name, description, ingress):
        return ec2.SecurityGroup(
            f'{self.root_resource_name}-{name}-sg',
            vpc_id=self.vpc.id,
            description=description,
            ingress=ingress,
            egress=[
                ec2.SecurityGroupEgressArgs(protocol='-1', from_port=0, to_port=0, cidr_blocks=['0.0.0.0/0'])
            ],
            tags={
                'Name': f'{self.root_tag_name} {name} security group {self.environment}'
            },
            opts=self._opts()
        )


def create_network(spec, settings):
    """Lay out one public and one private subnet per zone, with a NAT gateway per zone."""
    vpc = AwsVpc(
        environment=settings.environment,
        root_tag_name=spec.id,
        root_resource_name=spec.id,
        vpc_cidr=spec.cidr,
        protect_resources=settings.protect_resources,
        removal_policy=spec.teardown,
    )
    for i, az in enumerate(spec.zones):
        vpc.create_subnet(az, i)
        if spec.nat_gateways:
            vpc.create_nat_gateway(az)
    third_octet = PRIVATE_SUBNET_INCREMENTOR
    for az in spec.zones:
        vpc.create_subnet(az, third_octet, public=False)
        third_octet += PRIVATE_SUBNET_INCREMENTOR
    pulumi.log.debug(f'network {spec.id} spans {", ".join(spec.zones)}')
    return vpc
