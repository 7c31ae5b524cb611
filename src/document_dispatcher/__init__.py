"""Rate-limited document dispatcher.

Documents are submitted, queued, released at most ``limit`` per ``window``
and delivered to a single remote endpoint.
"""

__version__ = "0.1.0"
