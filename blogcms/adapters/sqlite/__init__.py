from blogcms.adapters.sqlite.migrator import SQLiteMigrator
from blogcms.adapters.sqlite.store import SQLiteDocumentStore

__all__ = ["SQLiteDocumentStore", "SQLiteMigrator"]
