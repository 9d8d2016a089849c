"""Record Spine -- SQL condition trees, query builders and Active-Record models.

Manifesto:
    Most applications need a thin, predictable layer between their objects
    and their SQL: something that renders the statement it is asked for,
    binds every value as a parameter, and never surprises anyone with a
    hidden query.  Record Spine is that layer and nothing more.

    - **Parameters, never interpolation:** values travel as ``?`` params
    - **Dialect-aware quoting:** identifiers quoted per backend
    - **Explicit state:** a model knows what it loaded and what changed

Architecture::

    Layer 1 -- Foundations
        errors.py          Structured error hierarchy (RecordSpineError)
        settings.py        RecordSpineSettings (RECORDSPINE_* env vars)
        logging.py         structlog configuration + get_logger()
        dialect.py         Identifier quoting + LIMIT rendering per backend
        protocols.py       Connection protocol

    Layer 2 -- SQL
        sql/conditions.py  ConditionBuilder (nested AND/OR trees)
        sql/clauses.py     Table / Values / Where / Having / Paginate mixins
        sql/query.py       Select, Insert, Update, Delete

    Layer 3 -- Storage
        adapters.py        sqlite3 + SQLAlchemy connections, named registry

    Layer 4 -- Active Record
        activerecord/      Model, Meta, fields, validation, Resultset

Tags:
    record-spine, sql, query-builder, active-record, orm-lite

Doc-Types:
    package-overview, architecture-map
"""

__version__ = "0.1.0"

from recordspine.activerecord import (
    Boolean,
    DateTime,
    Field,
    Integer,
    Meta,
    Model,
    ModelSelect,
    Resultset,
    Text,
    Validator,
)
from recordspine.adapters import (
    SAConnectionBridge,
    SqliteConnection,
    get_connection,
    register_connection,
)
from recordspine.dialect import Dialect, get_dialect
from recordspine.errors import (
    ConnectionNotFoundError,
    DialectRequiredError,
    ErrorCategory,
    ModelError,
    QueryError,
    RecordSpineError,
    ValidationError,
)
from recordspine.logging import configure_logging, get_logger
from recordspine.protocols import Connection
from recordspine.settings import RecordSpineSettings, get_settings
from recordspine.sql import ConditionBuilder, Delete, Expression, Insert, Select, Update

__all__ = [
    "__version__",
    # SQL
    "ConditionBuilder",
    "Expression",
    "Select",
    "Insert",
    "Update",
    "Delete",
    "Dialect",
    "get_dialect",
    # Storage
    "Connection",
    "SqliteConnection",
    "SAConnectionBridge",
    "register_connection",
    "get_connection",
    # Active record
    "Model",
    "Meta",
    "ModelSelect",
    "Resultset",
    "Field",
    "Text",
    "Integer",
    "Boolean",
    "DateTime",
    "Validator",
    # Errors
    "ErrorCategory",
    "RecordSpineError",
    "QueryError",
    "DialectRequiredError",
    "ModelError",
    "ConnectionNotFoundError",
    "ValidationError",
    # Ambient
    "RecordSpineSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
