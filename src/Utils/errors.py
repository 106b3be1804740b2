class PipelineError(Exception):
    """Base error for a pipeline run."""


class SourceError(PipelineError):
    """Input could not be opened or read."""


class SinkError(PipelineError):
    """Output could not be opened or written."""


class WorkerJoinTimeout(PipelineError):
    """Workers did not finish within the join timeout; output may be incomplete."""


class PipelineInterrupted(PipelineError):
    """The run was stopped before all input was processed."""


class ChannelInterrupted(Exception):
    """Raised from Channel.put/take after the channel was interrupted."""
