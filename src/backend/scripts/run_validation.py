from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from common.reading_review import (  # noqa: E402
    EmployeeRoster,
    EngineConfig,
    HistoricalIndex,
    RecordEnricher,
    ReferenceResolver,
    ValidationContext,
    ValidationPipeline,
)
from common.reading_review.logging_utils import configure_logging, log_event  # noqa: E402
from common.reading_review.models import EnrichedRecord, ValidationRunReport  # noqa: E402
from common.reading_review.settings import get_review_settings  # noqa: E402
from pipelines.data_source import JsonFileDataSource, ValidationInputs, get_data_source  # noqa: E402
from pipelines.record_store import LocalRecordStore  # noqa: E402

logger = logging.getLogger("scripts.run_validation")

CSV_COLUMNS = [
    "USUARIO",
    "ZONA",
    "CICLO",
    "FECHALECTURA",
    "FECHAFACTURA",
    "LECTURATOMADA",
    "LECTURAFACTURADA",
    "TIPODEERROR",
    "KWAJUSTADOS",
    "Lectura_1",
    "Lectura_2",
    "Lectura_3",
    "Lectura_4",
    "Lectura_5",
    "Lectura_6",
    "Obs_Lectura_1",
    "Obs_Lectura_2",
    "Obs_Lectura_3",
    "Obs_Lectura_4",
    "Obs_Lectura_5",
    "Obs_Lectura_6",
    "Operario",
    "medidor",
    "marcamedidor",
    "tipomedidor",
    "cedula",
    "tipo",
    "sede",
    "Validacion",
    "obsValidacion",
    "UbicacionError",
    "DigitoError",
]


@dataclass(frozen=True)
class ValidationOutcome:
    records: list[EnrichedRecord]
    report: ValidationRunReport


def run_validation_from_inputs(
    inputs: ValidationInputs,
    *,
    config: EngineConfig | None = None,
    reference_date: date | None = None,
) -> ValidationOutcome:
    ctx = ValidationContext(
        reference_date=reference_date or date.today(),
        config=config or EngineConfig(),
    )
    index = HistoricalIndex.build(inputs.historical_readings)
    resolver = ReferenceResolver(
        index=index,
        roster=EmployeeRoster(inputs.employees),
        meter_map=inputs.meter_map,
        meter_db_rows=inputs.meter_db_rows,
    )
    records = RecordEnricher(resolver, reference_date=ctx.reference_date).enrich_all(inputs.raw_readings)
    validated, report = ValidationPipeline().run(records, ctx)
    return ValidationOutcome(records=validated, report=report)


def _write_csv(records: list[EnrichedRecord], out_path: Path) -> None:
    with out_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for record in records:
            row = record.to_export()
            if row.get("DigitoError") is not None:
                row["DigitoError"] = json.dumps(row["DigitoError"], ensure_ascii=False)
            writer.writerow(row)


def _write_markdown(report: ValidationRunReport, out_path: Path) -> None:
    lines = [
        f"# Reading Validation {report.reference_date.isoformat()}",
        "",
        f"Generated at: {report.generated_at.isoformat()}",
        f"Run id: {report.run_id}",
        f"Records: {report.record_count}",
        "",
        "## Totals",
    ]
    for label, count in sorted(report.totals.items()):
        lines.append(f"- {label}: {count}")
    lines.append("")
    lines.append("## Decided by rule")
    for rule_id, count in sorted(report.decided_by.items()):
        lines.append(f"- {rule_id}: {count}")
    if report.rule_errors:
        lines.append("")
        lines.append(f"Rule errors (see log): {report.rule_errors}")
    out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    settings = get_review_settings()
    parser = argparse.ArgumentParser(
        description="Enrich flagged meter readings and run the validation rules."
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=settings.data_dir,
        help="Directory holding DatosConsulta.json and empleados.json.",
    )
    parser.add_argument(
        "--bundle",
        type=Path,
        default=None,
        help="Query export bundle (overrides <data-dir>/DatosConsulta.json).",
    )
    parser.add_argument(
        "--employees",
        type=Path,
        default=None,
        help="Employee roster JSON array (overrides <data-dir>/empleados.json).",
    )
    parser.add_argument(
        "--rules-config",
        type=Path,
        default=settings.rules_config_path,
        help="JSON or YAML file with per-rule overrides.",
    )
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=settings.reference_date,
        help="Date treated as today for window checks (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Where to write outputs (default: <data-dir>).",
    )
    parser.add_argument("--csv", action="store_true", help="Also write a CSV export.")
    parser.add_argument("--markdown", action="store_true", help="Also write a Markdown run summary.")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    if args.bundle is not None:
        source = JsonFileDataSource(bundle_path=args.bundle, employees_path=args.employees)
    elif args.employees is not None:
        source = JsonFileDataSource(
            bundle_path=args.data_dir / "DatosConsulta.json", employees_path=args.employees
        )
    else:
        source = get_data_source(args.data_dir)

    config = EngineConfig.from_file(args.rules_config) if args.rules_config else EngineConfig()
    outcome = run_validation_from_inputs(
        source.build_validation_inputs(),
        config=config,
        reference_date=args.reference_date,
    )

    out_dir = args.out_dir or args.data_dir
    store = LocalRecordStore(root_dir=out_dir)
    json_path = store.save_records(name="RegistrosValidados", records=outcome.records)
    written = [str(json_path)]
    if args.csv:
        csv_path = out_dir / "RegistrosValidados.csv"
        _write_csv(outcome.records, csv_path)
        written.append(str(csv_path))
    if args.markdown:
        md_path = out_dir / "RegistrosValidados.md"
        _write_markdown(outcome.report, md_path)
        written.append(str(md_path))

    log_event(logger, logging.INFO, "outputs_written", paths=written, records=outcome.report.record_count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
