"""
Congressional ETL pipeline registry and command-line entry point.

Run one or all entity pipelines for a legislature.

Usage:
    congresso-etl                        # all pipelines, current legislature
    congresso-etl 57 --only comissoes    # one pipeline, legislature 57
    congresso-etl --limite 10 --pc       # first 10 records, local store
    congresso-etl 56 -e --only senadores,liderancas
    congresso-etl --list                 # show available pipelines
    python -m congresso_etl --ajuda

Adding a new pipeline:
    1. Create extract_myfeed.py exposing PIPELINE = EntityPipeline(...)
       (see extract_liderancas.py for the simplest example).
    2. Add one entry to _build_registry below.
    3. Done — it appears automatically in --list and runs with --only myfeed.
"""

import argparse
import asyncio
import sys

from .config import LEGISLATURA_MAX, LEGISLATURA_MIN, RunOptions, Settings
from .context import open_context
from .errors import EtlError, PreconditionError, StageError
from .logging_config import setup_logging
from .processor import EntityPipeline, run_pipeline
from .storage import DocumentStore
from .utils import configure_utf8

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def _build_registry() -> dict[str, EntityPipeline]:
    from . import (
        extract_camara_deputados,
        extract_comissoes,
        extract_discursos,
        extract_liderancas,
        extract_mesas,
        extract_senators,
        extract_votacoes,
    )

    pipelines = [
        extract_comissoes.PIPELINE,
        extract_senators.PIPELINE,
        extract_liderancas.PIPELINE,
        extract_mesas.PIPELINE,
        extract_votacoes.PIPELINE,
        extract_discursos.PIPELINE,
        # ---- Chamber of Deputies (Câmara dos Deputados) ----
        extract_camara_deputados.PIPELINE,
    ]
    return {p.name: p for p in pipelines}


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def build_parser(registry: dict[str, EntityPipeline]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="congresso-etl",
        description="Extrai, transforma e carrega dados abertos do Senado e da Câmara.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Pipelines disponíveis: {', '.join(registry)}",
        add_help=False,
    )
    parser.add_argument(
        "legislatura",
        nargs="?",
        type=int,
        default=None,
        help=f"Número da legislatura ({LEGISLATURA_MIN}-{LEGISLATURA_MAX}; padrão: a atual).",
    )
    parser.add_argument(
        "-l", "--limite",
        type=int,
        default=None,
        metavar="N",
        help="Processa no máximo N registros por pipeline.",
    )
    parser.add_argument(
        "-e", "--exportar",
        action="store_true",
        help="Exporta os dados transformados para JSON/Parquet locais.",
    )
    parser.add_argument(
        "--pc",
        action="store_true",
        help="Salva no disco local em vez do Firestore.",
    )
    parser.add_argument(
        "--only",
        metavar="NAME[,NAME...]",
        default=None,
        help="Pipelines a executar, separados por vírgula (padrão: todos).",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Lista os pipelines disponíveis e sai.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log no nível DEBUG.",
    )
    parser.add_argument(
        "-h", "--help", "--ajuda",
        action="help",
        help="Mostra esta ajuda e sai.",
    )
    return parser


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def run_selected(
    pipelines: list[EntityPipeline],
    settings: Settings,
    options: RunOptions,
    logger,
    *,
    store: DocumentStore | None = None,
) -> list[str]:
    """Run each pipeline in order; returns the names of those that failed."""
    falhas: list[str] = []
    async with open_context(settings, options, logger, store=store) as ctx:
        for entity in pipelines:
            print(f"\n{'=' * 60}")
            print(f"PIPELINE: {entity.name}")
            print(f"{'=' * 60}")
            try:
                await run_pipeline(entity, ctx, options)
            except StageError as exc:
                print(f"FALHA [{exc.entity}] etapa {exc.stage}: {exc.cause}")
                falhas.append(entity.name)
            except PreconditionError as exc:
                print(f"FALHA [{entity.name}] etapa PRECONDICAO: {exc}")
                falhas.append(entity.name)
    return falhas


def main(argv: list[str] | None = None) -> int:
    configure_utf8()
    registry = _build_registry()
    parser = build_parser(registry)
    args = parser.parse_args(argv)

    if args.list:
        print("Pipelines disponíveis:\n")
        for name, entity in registry.items():
            print(f"  {name:<12} {entity.description}")
        return 0

    try:
        options = RunOptions(
            legislatura=args.legislatura,
            limite=args.limite,
            exportar=args.exportar,
            local=args.pc,
        )
    except ValueError as exc:
        parser.error(str(exc))

    if args.only:
        names = [n.strip() for n in args.only.split(",") if n.strip()]
        unknown = [n for n in names if n not in registry]
        if unknown:
            parser.error(f"pipeline(s) desconhecido(s): {unknown}. Disponíveis: {', '.join(registry)}")
        selected = [registry[n] for n in names]
    else:
        selected = list(registry.values())

    settings = Settings(log_level="DEBUG" if args.verbose else "INFO")
    logger = setup_logging(settings.log_level)

    try:
        falhas = asyncio.run(run_selected(selected, settings, options, logger))
    except KeyboardInterrupt:
        print("\nExecução cancelada pelo usuário.")
        return 130
    except EtlError as exc:
        print(f"FALHA: {exc}")
        return 1

    if falhas:
        print(f"\n{len(falhas)} pipeline(s) com falha: {', '.join(falhas)}")
        return 1
    print("\nTodos os pipelines concluídos.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
