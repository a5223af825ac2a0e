"""
YAML loader for the stored procedure catalog.

Stored procedure signatures are declared in a YAML file rather than read
from database metadata:

    procedures:
      usp_delete_user:
        returns: INTEGER
        parameters:
          - {name: "@id", type: INTEGER}
          - {name: "@active", type: BIT, nullable: true}

The path comes from the ``procedures_config`` setting
(``DMI_PROCEDURES_CONFIG``) unless passed explicitly.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from dmi.config.settings import get_settings
from dmi.infrastructure.sql.procedures import (
    ParameterType,
    ProcedureParameter,
    StoredProcedureData,
)

logger = structlog.get_logger(__name__)


class ParameterConfig(BaseModel):
    """Schema for one procedure parameter."""

    name: str = Field(..., min_length=1, description="Parameter name, '@' prefix optional")
    type: ParameterType = Field(..., description="SQL type of the parameter")
    nullable: bool = Field(True, description="Whether NULL is accepted")


class ProcedureConfig(BaseModel):
    """Schema for one stored procedure signature."""

    returns: Optional[ParameterType] = Field(None, description="Return value type")
    return_name: Optional[str] = Field(None, description="Return value name")
    parameters: List[ParameterConfig] = Field(default_factory=list)


class ProcedureCatalogConfig(BaseModel):
    """Schema for the complete catalog file."""

    procedures: Dict[str, ProcedureConfig] = Field(default_factory=dict)


def _to_procedure_data(name: str, config: ProcedureConfig) -> StoredProcedureData:
    return StoredProcedureData(
        name=name,
        parameters=[
            ProcedureParameter(p.name, p.type, p.nullable) for p in config.parameters
        ],
        return_type=config.returns,
        return_name=config.return_name,
    )


def load_procedure_catalog(
    path: Union[str, Path, None] = None,
) -> Dict[str, StoredProcedureData]:
    """
    Load stored procedure signatures keyed by procedure name.

    Behavior:
    - No path configured: Returns empty dict
    - Missing file: Returns empty dict, logs debug message (no exception)
    - Empty file: Returns empty dict
    - Invalid YAML or wrong shape: Raises ValueError with filename

    Args:
        path: Catalog file; defaults to the procedures_config setting

    Returns:
        Dict mapping procedure names to their signatures

    Raises:
        ValueError: If the file cannot be parsed or fails validation
    """
    if path is None:
        path = get_settings().procedures_config
    if not path:
        return {}

    file_path = Path(path)
    if not file_path.exists():
        logger.debug("procedure_loader.file_not_found", file_path=str(file_path))
        return {}

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(
            "procedure_loader.yaml_parse_error",
            file_path=str(file_path),
            error=str(e),
        )
        raise ValueError(f"Invalid YAML in {file_path}: {e}") from e

    if content is None:
        logger.debug("procedure_loader.empty_file", file_path=str(file_path))
        return {}

    if not isinstance(content, dict):
        raise ValueError(
            f"Invalid procedure catalog format in {file_path}: "
            f"expected dict, got {type(content).__name__}"
        )

    try:
        config = ProcedureCatalogConfig(**content)
    except ValidationError as e:
        logger.error(
            "procedure_loader.validation_failed",
            file_path=str(file_path),
            error=str(e),
        )
        raise ValueError(f"Procedure catalog {file_path} validation failed: {e}") from e

    catalog = {
        name: _to_procedure_data(name, procedure)
        for name, procedure in config.procedures.items()
    }
    logger.info(
        "procedure_loader.loaded",
        file_path=str(file_path),
        procedures=len(catalog),
    )
    return catalog
