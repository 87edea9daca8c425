"""app-launcher: lifecycle supervisor for a single long-running worker process.

Starts the worker in the foreground or as a daemon, stops, kills and restarts
it, and reports its status. The worker pid is tracked in a PID file that is
also used as an advisory lock between concurrent launcher invocations.
"""

__version__ = "0.1.0"
