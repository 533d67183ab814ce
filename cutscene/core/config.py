"""
Runtime configuration for the dialog core.
"""


class DialogConfig:
    """Configuration for the dialog manager and auto-play driver."""

    def __init__(
        self,
        auto_play_delay: float = 2.0,
        fast_forward_delay: float = 0.1,
        request_missing_sequences: bool = True,
        log_failed_payloads: bool = True,
    ):
        if auto_play_delay < 0 or fast_forward_delay < 0:
            raise ValueError("Auto-play delays must be non-negative")

        # Seconds an entry without options stays on screen during auto-play
        self.auto_play_delay = auto_play_delay
        # Delay used instead when the next advance is a skip
        self.fast_forward_delay = fast_forward_delay
        # Ask the remote peer for sequences missing from the registry
        self.request_missing_sequences = request_missing_sequences
        # Dump raw payload text at DEBUG when it fails to parse
        self.log_failed_payloads = log_failed_payloads
