"""
Command dispatch for the PrintDesk runtime.

Includes:
- CommandRegistry: channel -> handler map with error isolation and
  status notifications
- RequestLogThrottle: suppression cache for repeated request log entries
"""
