"""Synchronous Chrome DevTools Protocol client for page automation.

This package provides:
- ChromeDevTools: Tab lifecycle plus navigate/evaluate/click/type/wait actions
- CDPConnection: Command dispatch with session tracking over one WebSocket
- Waiters: Load-event wait and polling selector wait
- CLI: `devtools` command for one-shot page operations
"""

__version__ = "0.1.0"
