"""Managed Postgres instance"""
import pulumi
from pulumi_aws import ec2, rds

from storage_stack.components import Component, resource_options


def _first_secret_arn(secrets):
    return secrets[0].secret_arn if secrets else None


class Database(Component):
    attributes = {
        'endpoint_address': 'instance.address',
        'endpoint_port': 'instance.port',
        'secret_arn': 'secret_arn',
    }

    def __init__(self, spec, network, protect_resources=False):
        self.spec = spec
        opts = resource_options(protect_resources, spec.teardown)
        self.security_group = network.create_security_group(
            f'{spec.id}-db',
            f'{spec.id} {spec.engine} access from inside the VPC',
            ingress=[
                # The service is declared later, so its group cannot be named here.
                ec2.SecurityGroupIngressArgs(
                    protocol='tcp',
                    from_port=spec.port,
                    to_port=spec.port,
                    cidr_blocks=[network.vpc_cidr],
                )
            ],
        )
        self.subnet_group = rds.SubnetGroup(
            f'{spec.id.lower()}-subnets',
            subnet_ids=network.private_subnet_ids,
            tags={'Name': f'{spec.id} subnet group'},
            opts=opts,
        )
        # manage_master_user_password keeps the generated credentials in Secrets Manager
        self.instance = rds.Instance(
            spec.id.lower(),
            engine=spec.engine,
            engine_version=spec.engine_version,
            instance_class=spec.instance_class,
            allocated_storage=spec.allocated_storage,
            db_subnet_group_name=self.subnet_group.name,
            vpc_security_group_ids=[self.security_group.id],
            multi_az=spec.multi_az,
            publicly_accessible=spec.publicly_accessible,
            port=spec.port,
            username=spec.username,
            manage_master_user_password=spec.generate_credentials,
            deletion_protection=spec.deletion_protection,
            skip_final_snapshot=True,
            tags={'Name': spec.id},
            opts=resource_options(protect_resources, spec.teardown),
        )
        self.secret_arn = self.instance.master_user_secrets.apply(_first_secret_arn)
        pulumi.log.debug(f'database {spec.id} runs {spec.engine} {spec.engine_version} on {spec.instance_class}')
