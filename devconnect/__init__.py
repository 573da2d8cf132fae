"""
DevConnect Backend
===================

REST API for a developer matching app: accounts, profiles, and the
connect / accept / reject connection-request workflow.
"""

__version__ = "1.0.0"
