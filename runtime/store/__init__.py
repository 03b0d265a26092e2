"""
Storage abstractions for the PrintDesk runtime.

Includes:
- LogStore: bounded in-memory + daily JSONL file log of runtime events
- LogUpdateNotifier: throttled, debounced "log-update" signal for the UI
"""
