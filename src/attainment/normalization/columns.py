"""Column-index contracts of the three sheets (0-based, headers stripped)."""

from typing import Dict

from attainment.models.enums import SourceFeed
from attainment.models.rows import ColumnContract

# KPIS sheet: B=TIME, D=KPI, E=META, F=RESULTADO, H=NIVEL DE ACESSO,
# J=GRANDEZA, P=TENDENCIA, S=COMPETENCIA, AD=TIPO
KPI_COLUMNS = ColumnContract(
    team=1,
    indicator=3,
    meta=4,
    result=5,
    access_level=7,
    measure=9,
    trend=15,
    competency=18,
    mode=29,
)

# NOVO PAINEL OKR sheet: A=DATA, B=TIME, D=OBJETIVOS, F=INDICADORES, H=META,
# I=REALIZADO, L=TENDENCIA, M=MEDIDA, N=FORMA DE MEDIR, O=CHAVE
OKR_COLUMNS = ColumnContract(
    date=0,
    team=1,
    objective=3,
    indicator=5,
    meta=7,
    result=8,
    trend=11,
    measure=12,
    mode=13,
    key=14,
)

# Projetos sheet: A=ID, B=PROJETO, G=TIME, H=INDICADOR, I=TENDENCIA,
# J=RESULTADO ESPERADO, K=RESULTADO, M=QUANDO TERA IMPACTO, U=STATUS
PROJECT_COLUMNS = ColumnContract(
    key=0,
    objective=1,
    team=6,
    indicator=7,
    trend=8,
    meta=9,
    result=10,
    date=12,
    status=20,
)

DEFAULT_CONTRACTS: Dict[SourceFeed, ColumnContract] = {
    SourceFeed.KPI: KPI_COLUMNS,
    SourceFeed.OKR: OKR_COLUMNS,
    SourceFeed.PROJECT: PROJECT_COLUMNS,
}
