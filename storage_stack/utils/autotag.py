"""Automatically tag every taggable AWS resource in the stack"""
import pulumi

from storage_stack.utils.taggable import is_taggable


def register_auto_tags(auto_tags):
    pulumi.runtime.register_stack_transformation(lambda args: auto_tag(args, auto_tags))


def auto_tag(args, auto_tags):
    if is_taggable(args.type_):
        # explicit tags on the resource win over the stack-wide ones
        args.props['tags'] = {**auto_tags, **(args.props.get('tags') or {})}
        return pulumi.ResourceTransformationResult(args.props, args.opts)
    return None
