"""
userdb core package.

A walkthrough of relational database client usage:
- Connection configuration and injectable connection factories
  (`userdb.database`), for MySQL via PyMySQL and SQLite via sqlite3
- An idempotent schema bootstrapper and a small ``users`` command layer
- A transaction coordinator that always restores autocommit
- A Typer-based CLI (`userdb.cli`) and the scripted walkthrough
  (`userdb.demo`)

Configuration:
- Default connection parameters live in `userdb.global_config` and can be
  overridden with ``USERDB_*`` environment variables.
"""
