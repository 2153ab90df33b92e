class JointSpaceForcesError(Exception):
    """Base class for failures that end a decomposition run."""

    kind = "error"


class UsageError(JointSpaceForcesError):
    kind = "usage"


class ModelLoadError(JointSpaceForcesError):
    kind = "model"


class StreamAlignmentError(JointSpaceForcesError):
    """Input streams disagree on width, length or time tag."""

    kind = "stream"


class NumericalError(JointSpaceForcesError):
    """The dynamics engine failed while realizing or decomposing a frame."""

    kind = "numeric"
