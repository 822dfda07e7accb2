import logging

import pydantic
from packaging.version import parse
from pydantic.version import VERSION

logger = logging.getLogger(__name__)

version_parsed = parse(str(VERSION))

if version_parsed.major >= 2:
    PydanticVersion = 2
    from pydantic import ConfigDict
else:
    PydanticVersion = 1
    ConfigDict = None

# 2.11 renamed populate_by_name to validate_by_name / validate_by_alias
PYDANTIC_V2_11_PLUS = PydanticVersion >= 2 and (version_parsed.major, version_parsed.minor) >= (2, 11)

logger.debug(f"Running on Pydantic {VERSION}")


BaseModel: type = pydantic.BaseModel
Field: type = pydantic.Field
PrivateAttr: type = pydantic.PrivateAttr
ValidationError: type = pydantic.ValidationError


def get_model_config() -> dict:
    """Config keys that let documents be built from either the Python
    attribute names or the persisted (aliased) Firestore names."""
    if PYDANTIC_V2_11_PLUS:
        return {"validate_by_name": True, "validate_by_alias": True}
    if PydanticVersion >= 2:
        return {"populate_by_name": True}
    return {"allow_population_by_field_name": True}


# Pydantic V1: __fields__; Pydantic V2: model_fields
def get_model_fields(cls: type) -> dict:
    if PydanticVersion == 1:
        return getattr(cls, "__fields__", {})
    return getattr(cls, "model_fields", {})  # type: ignore[attr-defined]


def model_dump_compat(instance, **kwargs) -> dict:
    """``model_dump`` on V2, ``dict`` on V1. Same keyword arguments."""
    if PydanticVersion >= 2:
        return instance.model_dump(**kwargs)
    return instance.dict(**kwargs)


__all__ = [
    "BaseModel",
    "ConfigDict",
    "Field",
    "PrivateAttr",
    "ValidationError",
    "get_model_config",
    "get_model_fields",
    "model_dump_compat",
    "PydanticVersion",
    "PYDANTIC_V2_11_PLUS",
]
