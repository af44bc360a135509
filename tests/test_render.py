"""Tests for rendering the plan into pulumi_aws resources, run against Pulumi mocks."""

import json

import pulumi
import pytest

ACCOUNT_ID = '123456789012'


class StorageStackMocks(pulumi.runtime.Mocks):
    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        outputs = dict(args.inputs)
        outputs.setdefault('name', args.name)
        outputs.setdefault('arn', f'arn:aws:mock:us-east-1:{ACCOUNT_ID}:{args.name}')
        if args.typ == 'aws:s3/bucketV2:BucketV2':
            outputs.setdefault('bucket', args.name.lower())
            outputs['arn'] = f"arn:aws:s3:::{outputs['bucket']}"
        elif args.typ == 'aws:rds/instance:Instance':
            outputs['address'] = f'{args.name}.c1a2b3.us-east-1.rds.amazonaws.com'
            outputs['resourceId'] = 'db-ABCDEFGHIJKLMNOP'
            outputs['masterUserSecrets'] = [
                {'secretArn': f'arn:aws:secretsmanager:us-east-1:{ACCOUNT_ID}:secret:rds!db-1', 'secretStatus': 'active'}
            ]
        elif args.typ == 'aws:lb/loadBalancer:LoadBalancer':
            outputs['dnsName'] = f'{args.name}-1234567890.us-east-1.elb.amazonaws.com'
        elif args.typ == 'aws:ecr/repository:Repository':
            outputs['repositoryUrl'] = f"{ACCOUNT_ID}.dkr.ecr.us-east-1.amazonaws.com/{outputs['name']}"
        return [f'{args.name}_id', outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        if args.token == 'aws:index/getCallerIdentity:getCallerIdentity':
            return {
                'accountId': ACCOUNT_ID,
                'arn': f'arn:aws:iam::{ACCOUNT_ID}:user/test',
                'id': ACCOUNT_ID,
                'userId': 'AIDATEST',
            }
        return {}


pulumi.runtime.set_mocks(StorageStackMocks(), project='storage-stack', stack='test', preview=False)

from storage_stack import plan as stack_plan  # noqa: E402
from storage_stack.render import Renderer  # noqa: E402


@pytest.fixture(scope='module')
def renderer():
    from storage_stack.plan import build_plan
    from storage_stack.settings import NetworkSettings, StackSettings

    settings = StackSettings(
        environment='test',
        network=NetworkSettings(availability_zones=('us-east-1a', 'us-east-1b')),
    )
    renderer = Renderer(build_plan(settings), settings)
    renderer.render()
    return renderer


def test_every_descriptor_is_rendered(renderer):
    assert list(renderer.rendered) == [node.id for node in renderer.graph]


def test_network_has_public_and_private_subnets_per_zone(renderer):
    network = renderer.rendered[stack_plan.NETWORK_ID]

    assert list(network.public_subnets) == ['us-east-1a', 'us-east-1b']
    assert list(network.private_subnets) == ['us-east-1a', 'us-east-1b']
    assert list(network.nat_gateways) == ['us-east-1a', 'us-east-1b']


@pulumi.runtime.test
def test_bucket_is_versioned_private_and_emptied_on_delete(renderer):
    storage = renderer.rendered[stack_plan.BUCKET_ID]

    def check(args):
        force_destroy, status, acls, policy, ignore, restrict = args
        assert force_destroy is True
        assert status == 'Enabled'
        assert all([acls, policy, ignore, restrict])

    return pulumi.Output.all(
        storage.bucket.force_destroy,
        storage.versioning.versioning_configuration.status,
        storage.public_access_block.block_public_acls,
        storage.public_access_block.block_public_policy,
        storage.public_access_block.ignore_public_acls,
        storage.public_access_block.restrict_public_buckets,
    ).apply(check)


@pulumi.runtime.test
def test_database_is_private_and_destroyed_with_stack(renderer):
    database = renderer.rendered[stack_plan.DATABASE_ID]

    def check(args):
        public, multi_az, managed_password, skip_snapshot, deletion_protection, engine, version = args
        assert public is False
        assert multi_az is False
        assert managed_password is True
        assert skip_snapshot is True
        assert deletion_protection is False
        assert (engine, version) == ('postgres', '15.5')

    return pulumi.Output.all(
        database.instance.publicly_accessible,
        database.instance.multi_az,
        database.instance.manage_master_user_password,
        database.instance.skip_final_snapshot,
        database.instance.deletion_protection,
        database.instance.engine,
        database.instance.engine_version,
    ).apply(check)


@pulumi.runtime.test
def test_database_admits_postgres_from_vpc_only(renderer):
    database = renderer.rendered[stack_plan.DATABASE_ID]

    def check(ingress):
        assert len(ingress) == 1
        rule = ingress[0]
        assert (rule.protocol, rule.from_port, rule.to_port) == ('tcp', 5432, 5432)
        assert rule.cidr_blocks == ['10.0.0.0/16']

    return database.security_group.ingress.apply(check)


@pulumi.runtime.test
def test_registry_is_force_deleted(renderer):
    registry = renderer.rendered[stack_plan.REGISTRY_ID]

    def check(args):
        name, force_delete = args
        assert name == 'storage-app'
        assert force_delete is True

    return pulumi.Output.all(registry.repository.name, registry.repository.force_delete).apply(check)


@pulumi.runtime.test
def test_service_environment_resolves_to_provisioned_values(renderer):
    service = renderer.rendered[stack_plan.SERVICE_ID]
    database = renderer.rendered[stack_plan.DATABASE_ID]
    storage = renderer.rendered[stack_plan.BUCKET_ID]

    def check(args):
        container_definitions, address, bucket_name = args
        (container,) = json.loads(container_definitions)
        environment = {item['name']: item['value'] for item in container['environment']}
        assert environment == {'DATABASE_URL': address, 'S3_BUCKET': bucket_name}
        assert container['portMappings'] == [{'containerPort': 3000, 'protocol': 'tcp'}]
        assert container['image'].endswith('/storage-app:latest')

    return pulumi.Output.all(
        service.container_definitions,
        database.instance.address,
        storage.bucket.bucket,
    ).apply(check)


@pulumi.runtime.test
def test_load_balancer_is_public(renderer):
    service = renderer.rendered[stack_plan.SERVICE_ID]

    def check(args):
        internal, desired_count = args
        assert internal is False
        assert desired_count == 1

    return pulumi.Output.all(service.load_balancer.internal, service.service.desired_count).apply(check)


@pulumi.runtime.test
def test_task_role_policies_follow_grants(renderer):
    role = renderer.rendered[stack_plan.ROLE_ID]

    def check(policies):
        bucket_policy, database_policy = [json.loads(policy) for policy in policies]
        (bucket_statement,) = bucket_policy['Statement']
        assert 's3:GetObject*' in bucket_statement['Action']
        assert 's3:PutObject' in bucket_statement['Action']
        assert bucket_statement['Resource'][1].endswith('/*')
        (db_statement,) = database_policy['Statement']
        assert db_statement['Action'] == ['rds-db:connect']
        assert db_statement['Resource'] == (
            f'arn:aws:rds-db:us-east-1:{ACCOUNT_ID}:dbuser:db-ABCDEFGHIJKLMNOP/postgres')

    assert len(role.policies) == 2
    return pulumi.Output.all(*[policy.policy for policy in role.policies]).apply(check)


@pulumi.runtime.test
def test_user_pool_uses_email_sign_in(renderer):
    directory = renderer.rendered[stack_plan.USER_POOL_ID]
    client = renderer.rendered[stack_plan.USER_POOL_CLIENT_ID]

    def check(args):
        name, username_attributes, deletion_protection, generate_secret = args
        assert name == 'StorageAppUsers'
        assert username_attributes == ['email']
        assert deletion_protection == 'INACTIVE'
        assert generate_secret is False

    return pulumi.Output.all(
        directory.user_pool.name,
        directory.user_pool.username_attributes,
        directory.user_pool.deletion_protection,
        client.client.generate_secret,
    ).apply(check)


@pulumi.runtime.test
def test_outputs_are_complete_and_non_empty(renderer):
    assert set(renderer.outputs) == {'BucketName', 'DatabaseEndpoint', 'LoadBalancerURL', 'UserPoolId'}

    def check(values):
        assert all(isinstance(value, str) and value for value in values)

    return pulumi.Output.all(*renderer.outputs.values()).apply(check)

