"""
Backend package for the Mente Sana wellbeing API.

Accounts, mood logging, guided exercises, challenges and the virtual pet,
persisted on either an embedded SQLite file or a networked SQL server
through one adapter interface.
"""
