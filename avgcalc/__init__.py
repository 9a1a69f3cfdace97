"""Average calculator microservice: sliding-window averages over upstream number feeds."""

__version__ = "1.0.0"
