"""
Pydantic datamodels used by the PrintDesk runtime.

Split into:
- log_models: LogEntry + LogLevel
- api_models: command results, status notifications, event envelopes
"""
