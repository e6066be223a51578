"""
sparkbinding: Checkpointed Spark Streaming lifecycle for Kafka-fed pipelines.

Binds a long-running pipeline to a Spark Structured Streaming job that
consumes from Kafka and restarts from its checkpoint after a crash.
"""

__version__ = "0.1.0"
