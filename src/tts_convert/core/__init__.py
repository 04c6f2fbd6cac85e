"""
Core infrastructure for tts-convert.

    - config.py: Settings loading (YAML + environment) and validation
    - logging/: Structured logging with request correlation
    - metrics.py: Prometheus metrics
    - errors.py: Error codes and exception hierarchy
"""
