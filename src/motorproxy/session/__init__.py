"""
Session management for the proxy.

- state: credential and expiry of the upstream session
- manager: cached credential with single-flight refresh
"""

from motorproxy.session.manager import SessionManager
from motorproxy.session.state import SessionState

__all__ = ["SessionManager", "SessionState"]
