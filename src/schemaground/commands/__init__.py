"""Shell commands exposing SchemaPyground functionalities.

This module contains the shell commands that can be used to interact with SchemaPyground.

DDL shell
=========

``pyground-ddl`` manages databases and runs DDL statements on them::

    pyground-ddl create-db shop
    pyground-ddl exec shop "CREATE TABLE products (id INT PRIMARY KEY, name VARCHAR(64))"
    pyground-ddl exec shop "ALTER TABLE products ADD COLUMN price DECIMAL(10,2) DEFAULT 0"
    pyground-ddl schema shop
    pyground-ddl show shop products

The data directory defaults to ``./data`` and can be changed with ``--data-dir``
or the ``SCHEMAGROUND__DATA_DIR`` environment variable.
"""
