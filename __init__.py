"""
Sentinels Map application.

A FastAPI-powered backend for a map dashboard where users place, rename and
delete categorized markers (threats, assets, logistics), shared live between
clients.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""
