"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only the default
connection parameters and the environment variable names that can override
them. `userdb.database.config.ConnectionConfig` builds on top of these.
"""

# Default connection parameters (MySQL over TCP on localhost)
DEFAULT_HOST = "tcp://127.0.0.1:3306"
DEFAULT_USER = "root"
DEFAULT_PASSWORD = ""
DEFAULT_SCHEMA = "testdb"
DEFAULT_MYSQL_PORT = 3306
DEFAULT_CONNECT_TIMEOUT_S = 10

# Environment overrides
ENV_HOST = "USERDB_HOST"
ENV_USER = "USERDB_USER"
ENV_PASSWORD = "USERDB_PASSWORD"
ENV_SCHEMA = "USERDB_SCHEMA"
