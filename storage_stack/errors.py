"""Plan construction errors"""
import pulumi


class PlanError(pulumi.RunError):
    """Base class for errors raised while building the resource plan.

    Subclassing RunError lets `pulumi up` report these as program errors
    without a Python traceback.
    """


class DanglingReferenceError(PlanError):
    def __init__(self, source, target):
        self.source = source
        self.target = target
        super().__init__(f"'{source}' references '{target}', which has not been declared")


class UnknownAttributeError(PlanError):
    def __init__(self, source, target, attribute):
        self.source = source
        self.target = target
        self.attribute = attribute
        super().__init__(f"'{source}' reads attribute '{attribute}' that '{target}' does not expose")


class NamingCollisionError(PlanError):
    def __init__(self, name, scope='logical id'):
        self.name = name
        self.scope = scope
        super().__init__(f"{scope} '{name}' is already declared")


class InvalidGrantError(PlanError):
    pass


class InvalidConfigurationError(PlanError):
    pass
