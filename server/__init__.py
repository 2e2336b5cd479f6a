"""
Server modules for Sentinels Map application.

This package contains FastAPI router modules for handling API endpoints,
client sessions, document stores, sync and broadcasting.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""
