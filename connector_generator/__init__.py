"""API connector generator: discover a REST API, infer its schemas, generate a typed client."""

__version__ = "1.0.0"
