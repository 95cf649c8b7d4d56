from dataclasses import dataclass
from pathlib import Path

# Resolve paths relative to this file so the pipeline works from any CWD
_PACKAGE_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _PACKAGE_DIR.parent.parent

# Federal Senate (LEGIS)
BASE_URL = "https://legis.senado.leg.br/dadosabertos"
SENADO_DELAY = 0.15  # LEGIS: 10 req/s max

# Chamber of Deputies (Câmara dos Deputados)
CAMARA_BASE_URL = "https://dadosabertos.camara.leg.br/api/v2"
CAMARA_DELAY = 0.1

REQUEST_TIMEOUT = 30.0
RETRY_ATTEMPTS = 3
RETRY_DELAY = 2.0
RETRY_BACKOFF = 1.0

# Firestore rejects batches with more than 500 writes
MAX_BATCH_OPERATIONS = 500

# Concurrent per-record detail/composition fetches inside an extractor
AUX_CONCURRENCY = 3

LEGISLATURAS_FILE = _PACKAGE_DIR / "data" / "ListaLegislatura.xml"
EXPORT_DIR = _REPO_ROOT / "data" / "exportados"
LOCAL_STORE_DIR = _REPO_ROOT / "data" / "firestore_local"

LEGISLATURA_MIN = 1
LEGISLATURA_MAX = 100


@dataclass(frozen=True)
class Settings:
    """Static configuration for one process. Built once in the CLI."""

    senado_base_url: str = BASE_URL
    camara_base_url: str = CAMARA_BASE_URL
    senado_delay: float = SENADO_DELAY
    camara_delay: float = CAMARA_DELAY
    timeout: float = REQUEST_TIMEOUT
    retry_attempts: int = RETRY_ATTEMPTS
    retry_delay: float = RETRY_DELAY
    retry_backoff: float = RETRY_BACKOFF
    max_batch_operations: int = MAX_BATCH_OPERATIONS
    concorrencia: int = AUX_CONCURRENCY
    legislaturas_file: Path = LEGISLATURAS_FILE
    export_dir: Path = EXPORT_DIR
    local_store_dir: Path = LOCAL_STORE_DIR
    firestore_projeto: str | None = None
    log_level: str = "INFO"


@dataclass(frozen=True)
class RunOptions:
    """Validated command-line options for one invocation.

    Parameters
    ----------
    legislatura : int | None
        Legislature number; None means "resolve the current one".
    limite : int | None
        Cap on primary records processed per entity.
    exportar : bool
        Also write normalized output to local JSON/Parquet files.
    local : bool
        Write the store-shaped structure to local disk instead of Firestore.
    """

    legislatura: int | None = None
    limite: int | None = None
    exportar: bool = False
    local: bool = False

    def __post_init__(self) -> None:
        if self.legislatura is not None and not (
            LEGISLATURA_MIN <= self.legislatura <= LEGISLATURA_MAX
        ):
            raise ValueError(
                f"Legislatura inválida: {self.legislatura}. "
                f"Deve ser um número entre {LEGISLATURA_MIN} e {LEGISLATURA_MAX}."
            )
        if self.limite is not None and self.limite <= 0:
            raise ValueError("Limite deve ser maior que zero")
