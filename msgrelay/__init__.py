"""
Message Relay

A minimal at-least-once message pipeline: an HTTP ingestion endpoint pushes
text messages onto a Redis list, and competing workers pop, process, and
append the results to a durable log.
"""

__version__ = "1.0.0"
