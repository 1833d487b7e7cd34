from pathlib import Path
from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from attainment.models.enums import SourceFeed


class ConfigurationError(Exception):
    """Raised when an alias table or engine configuration cannot be loaded."""

    pass


class AliasTable(BaseModel):
    """Static team-name configuration.

    ``teams`` maps each canonical team id to the spellings every feed uses
    for it. The same feed spelling may appear under several canonical ids,
    in which case that feed's rows fan out to all of them. ``exclusions``
    lists per-feed spellings whose rows are dropped entirely.
    """

    model_config = ConfigDict(frozen=True)

    teams: Dict[str, Dict[SourceFeed, List[str]]] = Field(default_factory=dict)
    exclusions: Dict[SourceFeed, List[str]] = Field(default_factory=dict)


def load_alias_table(path: Union[str, Path]) -> AliasTable:
    """Reads and validates an alias table stored as JSON."""
    path = Path(path)
    try:
        return AliasTable.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read alias table {path}: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Invalid alias table {path}: {e}") from e


# OKR teams are the canonical names. KPI sheet names differ for most teams;
# FEAT was renamed to "FEAT E GROWTH" in 10/2025 and both spellings still
# appear in the KPI history. QUOKKA's OKRs belong to two KPI teams.
DEFAULT_ALIAS_TABLE = AliasTable(
    teams={
        "ATENDIMENTO": {
            SourceFeed.KPI: ["ATENDIMENTO"],
            SourceFeed.OKR: ["ATENDIMENTO"],
            SourceFeed.PROJECT: ["ATENDIMENTO"],
        },
        "CONSULTORIA": {
            SourceFeed.KPI: ["CONSULTORIA PERFORMANCE"],
            SourceFeed.OKR: ["CONSULTORIA"],
            SourceFeed.PROJECT: ["CONSULTORIA"],
        },
        "EXPANSÃO": {
            SourceFeed.KPI: ["EXPANSÃO"],
            SourceFeed.OKR: ["EXPANSÃO"],
            SourceFeed.PROJECT: ["EXPANSÃO"],
        },
        "FEAT | GROWTH": {
            SourceFeed.KPI: ["FEAT", "FEAT E GROWTH"],
            SourceFeed.OKR: ["FEAT | GROWTH", "FEAT"],
            SourceFeed.PROJECT: ["FEAT | GROWTH"],
        },
        "FORNECEDORES": {
            SourceFeed.KPI: ["SQUAD FORNECEDORES"],
            SourceFeed.OKR: ["FORNECEDORES"],
            SourceFeed.PROJECT: ["FORNECEDORES"],
        },
        "GESTÃO": {
            SourceFeed.KPI: ["GESTÃO"],
            SourceFeed.OKR: ["GESTÃO"],
            SourceFeed.PROJECT: ["GESTÃO"],
        },
        "GP": {
            SourceFeed.KPI: ["GESTÃO DE PESSOAS"],
            SourceFeed.OKR: ["GP"],
            SourceFeed.PROJECT: ["GP"],
        },
        "MARKETING": {
            SourceFeed.KPI: ["MARKETING"],
            SourceFeed.OKR: ["MARKETING"],
            SourceFeed.PROJECT: ["MARKETING"],
        },
        "MARKETING E GROWTH": {
            SourceFeed.KPI: ["MARKETING E GROWTH"],
            SourceFeed.OKR: ["MARKETING E GROWTH"],
            SourceFeed.PROJECT: ["MARKETING E GROWTH"],
        },
        "PÓS VENDA": {
            SourceFeed.KPI: ["PÓS VENDA - CAF"],
            SourceFeed.OKR: ["POS VENDA"],
            SourceFeed.PROJECT: ["PÓS VENDA"],
        },
        "CASH OUT | CONTROLADORIA": {
            SourceFeed.KPI: ["CASH OUT | CONTROLADORIA"],
            SourceFeed.OKR: ["QUOKKA"],
        },
        "FINANCEIRO (CSC)": {
            SourceFeed.KPI: ["FINANCEIRO (CSC)"],
            SourceFeed.OKR: ["QUOKKA"],
        },
        "TI": {
            SourceFeed.KPI: ["TI"],
            SourceFeed.OKR: ["TI"],
            SourceFeed.PROJECT: ["TI"],
        },
        "PERFORMANCE": {
            SourceFeed.KPI: ["PERFORMANCE"],
            SourceFeed.OKR: ["PERFORMANCE"],
            SourceFeed.PROJECT: ["PERFORMANCE"],
        },
    },
    exclusions={
        SourceFeed.KPI: ["FRANQUEADORA"],
        SourceFeed.OKR: ["INOVAÇÃO"],
        SourceFeed.PROJECT: ["INOVAÇÃO"],
    },
)
