"""
motorproxy: EBSCO-authenticated HTTP proxy for the Motor.com M1 API.
"""

__version__ = "0.1.0"
