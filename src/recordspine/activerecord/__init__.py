"""Active-Record layer: models that persist themselves through the query builders.

Import order matters only in one direction: ``model`` depends on
``query`` and ``resultset``, which reference the model type lazily.
"""

from recordspine.activerecord.fields import Boolean, DateTime, Field, Integer, Text
from recordspine.activerecord.meta import Meta
from recordspine.activerecord.model import Model
from recordspine.activerecord.query import ModelSelect
from recordspine.activerecord.resultset import Resultset
from recordspine.activerecord.validation import Validator, register_rule

__all__ = [
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
    "register_rule",
]
