"""Object storage and container image registry"""
from pulumi_aws import ecr, s3

from storage_stack.components import Component, resource_options
from storage_stack.descriptors import RemovalPolicy


class StorageBucket(Component):
    attributes = {
        'bucket_name': 'bucket.bucket',
        'bucket_arn': 'bucket.arn',
    }

    def __init__(self, spec, protect_resources=False):
        opts = resource_options(protect_resources, spec.teardown)
        # force_destroy empties the bucket before it is deleted with the stack
        self.bucket = s3.BucketV2(
            spec.id,
            force_destroy=spec.auto_delete_objects,
            tags={'Name': spec.id},
            opts=opts,
        )
        self.versioning = s3.BucketVersioningV2(
            f'{spec.id}-versioning',
            bucket=self.bucket.id,
            versioning_configuration=s3.BucketVersioningV2VersioningConfigurationArgs(
                status='Enabled' if spec.versioned else 'Suspended',
            ),
            opts=resource_options(protect_resources, spec.teardown),
        )
        self.public_access_block = None
        if spec.block_public_access:
            self.public_access_block = s3.BucketPublicAccessBlock(
                f'{spec.id}-public-access-block',
                bucket=self.bucket.id,
                block_public_acls=True,
                block_public_policy=True,
                ignore_public_acls=True,
                restrict_public_buckets=True,
                opts=resource_options(protect_resources, spec.teardown),
            )


class ImageRegistry(Component):
    attributes = {'repository_url': 'repository.repository_url'}

    def __init__(self, spec, protect_resources=False):
        self.repository = ecr.Repository(
            spec.id,
            name=spec.repository_name,
            image_tag_mutability='MUTABLE',
            force_delete=spec.teardown == RemovalPolicy.DESTROY,
            tags={'Name': spec.repository_name},
            opts=resource_options(protect_resources, spec.teardown),
        )
