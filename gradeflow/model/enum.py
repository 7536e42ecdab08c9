import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Test = "test"
    Local = "local"


class ScorePolicy(enum.Enum):
    """How grader scores outside [min_fraction, max_fraction] are treated"""

    Clamp = "clamp"
    Reject = "reject"
    PassThrough = "passthrough"
