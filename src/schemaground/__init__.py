"""SchemaPyground

A file backed relational schema engine built from scratch for learning purposes.

SchemaPyground accepts DDL statements, keeps the metadata of the tables
of each database and stores their rows as JSON documents, migrating the
stored rows every time the schema of a table changes.

The engine is constituted by multiple components, each isolated within its own
package and each self documented in literate programming style.

The primary components are:

* The DDL parser (:mod:`schemaground.sql`), turning statements into
  tables and alter commands.
* The Catalog (:mod:`schemaground.catalog`), the in memory model
  of databases, tables and columns.
* The Storage (:mod:`schemaground.storage`), persisting tables and rows
  on disk and migrating rows when a table is altered.

:class:`schemaground.engine.DatabaseEngine` ties them together.
For the user guide and code documentation of each component, refer to the
component itself.
"""

from . import catalog, sql, storage

__all__ = ("catalog", "sql", "storage")
