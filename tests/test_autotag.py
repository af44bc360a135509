"""Unit tests for automatic resource tagging."""

from types import SimpleNamespace

import pulumi

from storage_stack.utils.autotag import auto_tag
from storage_stack.utils.taggable import is_taggable

AUTO_TAGS = {'source': 'pulumi', 'environment': 'test'}


def transformation_args(type_, props):
    return SimpleNamespace(type_=type_, props=props, opts=pulumi.ResourceOptions())


class TestAutoTag:
    """Test the stack transformation."""

    def test_taggable_resource_gets_stack_tags(self):
        """Stack tags are merged into resource tags."""
        args = transformation_args('aws:s3/bucketV2:BucketV2', {'tags': {'Name': 'StorageFilesBucket'}})

        result = auto_tag(args, AUTO_TAGS)

        assert result.props['tags'] == {'Name': 'StorageFilesBucket', 'source': 'pulumi', 'environment': 'test'}

    def test_resource_tags_win_over_stack_tags(self):
        """An explicit tag is not overwritten."""
        args = transformation_args('aws:ec2/vpc:Vpc', {'tags': {'environment': 'override'}})

        result = auto_tag(args, AUTO_TAGS)

        assert result.props['tags']['environment'] == 'override'

    def test_untagged_resource_gets_tags(self):
        """Resources declared without tags still receive the stack tags."""
        args = transformation_args('aws:ecs/cluster:Cluster', {})

        result = auto_tag(args, AUTO_TAGS)

        assert result.props['tags'] == AUTO_TAGS

    def test_non_taggable_resource_is_untouched(self):
        """Types without a tags property are skipped."""
        args = transformation_args('aws:iam/rolePolicy:RolePolicy', {'policy': '{}'})

        assert auto_tag(args, AUTO_TAGS) is None
        assert 'tags' not in args.props
        assert not is_taggable('aws:s3/bucketPublicAccessBlock:BucketPublicAccessBlock')
