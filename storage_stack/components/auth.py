"""Cognito user pool and its app client"""
from pulumi_aws import cognito

from storage_stack.components import Component, resource_options
from storage_stack.descriptors import RemovalPolicy


class UserDirectory(Component):
    attributes = {'user_pool_id': 'user_pool.id'}

    def __init__(self, spec, protect_resources=False):
        self.user_pool = cognito.UserPool(
            spec.id,
            name=spec.user_pool_name,
            username_attributes=list(spec.sign_in_aliases),
            auto_verified_attributes=[alias for alias in spec.sign_in_aliases if alias in ('email', 'phone_number')],
            admin_create_user_config=cognito.UserPoolAdminCreateUserConfigArgs(
                allow_admin_create_user_only=not spec.self_sign_up,
            ),
            schemas=[
                cognito.UserPoolSchemaArgs(
                    name=attribute.name,
                    attribute_data_type='String',
                    required=attribute.required,
                    mutable=attribute.mutable,
                    string_attribute_constraints=cognito.UserPoolSchemaStringAttributeConstraintsArgs(
                        min_length='0',
                        max_length='2048',
                    ),
                )
                for attribute in spec.standard_attributes
            ],
            deletion_protection='INACTIVE' if spec.teardown == RemovalPolicy.DESTROY else 'ACTIVE',
            tags={'Name': spec.user_pool_name},
            opts=resource_options(protect_resources, spec.teardown),
        )


class UserDirectoryClient(Component):
    attributes = {'client_id': 'client.id'}

    def __init__(self, spec, directory, protect_resources=False):
        self.client = cognito.UserPoolClient(
            spec.id,
            user_pool_id=directory.user_pool.id,
            generate_secret=spec.generate_secret,
            opts=resource_options(protect_resources, spec.teardown),
        )
