"""
Local export of normalized results (``--exportar``).

Output layout:
    <export_dir>/<entidade>/<legislatura>/<entidade>.json     records + resumo
    <export_dir>/<entidade>/<legislatura>/<entidade>.parquet  scalar columns only
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING

from .utils import save_parquet, scalar_columns

if TYPE_CHECKING:
    from .processor import TransformResult


def export_result(
    result: "TransformResult",
    entidade: str,
    legislatura: int,
    export_dir: Path,
) -> list[Path]:
    """Write JSON and Parquet files for one run; returns the paths written."""
    out_dir = Path(export_dir) / entidade / str(legislatura)
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / f"{entidade}.json"
    json_path.write_text(
        json.dumps(
            {
                "entidade":    entidade,
                "legislatura": legislatura,
                "total":       result.total,
                "resumo":      result.resumo,
                "registros":   result.records,
            },
            ensure_ascii=False,
            indent=2,
            default=str,
        ),
        encoding="utf-8",
    )
    written = [json_path]

    parquet_path = out_dir / f"{entidade}.parquet"
    if save_parquet(scalar_columns(result.records), parquet_path):
        written.append(parquet_path)
    return written
