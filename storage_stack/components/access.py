"""Task role and the policies behind its grants"""
import json

import pulumi
from pulumi_aws import iam

from storage_stack.components import Component, resource_options
from storage_stack.descriptors import Access, ResourceKind

BUCKET_READ_ACTIONS = [
    's3:GetObject*',
    's3:GetBucket*',
    's3:List*',
]
BUCKET_WRITE_ACTIONS = [
    's3:DeleteObject*',
    's3:PutObject',
    's3:PutObjectLegalHold',
    's3:PutObjectRetention',
    's3:PutObjectTagging',
    's3:PutObjectVersionTagging',
    's3:Abort*',
]


def assume_role_policy(principal):
    return json.dumps({
        'Version': '2012-10-17',
        'Statement': [
            {
                'Effect': 'Allow',
                'Principal': {'Service': principal},
                'Action': 'sts:AssumeRole',
            }
        ],
    })


class TaskRole(Component):
    attributes = {'role_arn': 'role.arn'}

    def __init__(self, spec, protect_resources=False):
        self.spec = spec
        self.protect_resources = protect_resources
        self.policies = []
        self.role = iam.Role(
            spec.id,
            assume_role_policy=assume_role_policy(spec.assumed_by),
            tags={'Name': spec.id},
            opts=resource_options(protect_resources, spec.teardown),
        )

    def attach_grant(self, resource_id, statements):
        policy = iam.RolePolicy(
            f'{self.spec.id}-{resource_id}-policy',
            role=self.role.id,
            policy=statements.apply(lambda s: json.dumps({'Version': '2012-10-17', 'Statement': s})),
            opts=resource_options(self.protect_resources, self.spec.teardown),
        )
        self.policies.append(policy)
        return policy


def bucket_statements(bucket, access, **_):
    actions = []
    if Access.READ in access:
        actions += BUCKET_READ_ACTIONS
    if Access.WRITE in access:
        actions += BUCKET_WRITE_ACTIONS
    return bucket.attribute('bucket_arn').apply(lambda arn: [
        {
            'Effect': 'Allow',
            'Action': actions,
            'Resource': [arn, f'{arn}/*'],
        }
    ])


def database_statements(database, access, region, account_id):
    return pulumi.Output.all(database.instance.resource_id, account_id).apply(lambda args: [
        {
            'Effect': 'Allow',
            'Action': ['rds-db:connect'],
            'Resource': f'arn:aws:rds-db:{region}:{args[1]}:dbuser:{args[0]}/{database.spec.username}',
        }
    ])


STATEMENT_BUILDERS = {
    ResourceKind.BUCKET: bucket_statements,
    ResourceKind.DATABASE: database_statements,
}


def grant_statements(kind, component, access, region, account_id):
    """IAM statements equivalent to `access` on a rendered resource."""
    return STATEMENT_BUILDERS[kind](component, access, region=region, account_id=account_id)
