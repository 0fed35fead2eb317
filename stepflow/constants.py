DEFAULT_MAX_RETRIES = 3

# Retry backoff, in seconds
DEFAULT_RETRY_INITIAL_DELAY = 2.0
DEFAULT_RETRY_BACKOFF_BASE = 1.5
DEFAULT_RETRY_JITTER = 0.5
DEFAULT_RETRY_MAX_DELAY = 30.0

DEFAULT_CANCEL_GRACE_PERIOD = 5.0

# Simulated executor, durations in ms
DEFAULT_SIMULATED_DURATION = 2000
DEFAULT_FAILURE_RATE = 0.1
