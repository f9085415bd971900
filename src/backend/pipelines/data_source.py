from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


@dataclass(frozen=True)
class ValidationInputs:
    raw_readings: tuple[dict[str, Any], ...] = ()
    historical_readings: tuple[dict[str, Any], ...] = ()
    meter_map: dict[str, Any] = field(default_factory=dict)
    meter_db_rows: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    employees: tuple[dict[str, Any], ...] = ()


class DataSource(Protocol):
    def build_validation_inputs(self) -> ValidationInputs:
        """Return in-memory inputs for the enricher and pipeline."""
        ...


def flatten_historical(registros: Any) -> list[dict[str, Any]]:
    """Historical rows arrive either as a flat list or grouped by client."""
    if registros is None:
        return []
    if isinstance(registros, list):
        return list(registros)
    if isinstance(registros, dict):
        rows: list[dict[str, Any]] = []
        for client_rows in registros.values():
            if isinstance(client_rows, list):
                rows.extend(client_rows)
        return rows
    raise TypeError(f"'registros' must be a list or an object of lists, got {type(registros).__name__}.")


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


class JsonFileDataSource:
    """Reads the query export bundle plus an optional employee roster file.

    The bundle carries ``data`` (raw readings), ``registros`` (history),
    ``medidores`` (client -> meter number) and ``medidores_db``
    (client -> meter rows).
    """

    def __init__(self, *, bundle_path: Path, employees_path: Path | None = None) -> None:
        self._bundle_path = bundle_path
        self._employees_path = employees_path

    def build_validation_inputs(self) -> ValidationInputs:
        bundle = _load_json(self._bundle_path)
        if not isinstance(bundle, dict):
            raise TypeError(f"{self._bundle_path} must contain a JSON object.")

        data = bundle.get("data")
        raw_readings = data if isinstance(data, list) else []

        employees: list[dict[str, Any]] = []
        if self._employees_path is not None and self._employees_path.exists():
            loaded = _load_json(self._employees_path)
            if not isinstance(loaded, list):
                raise TypeError(f"{self._employees_path} must contain a JSON array of employees.")
            employees = loaded

        return ValidationInputs(
            raw_readings=tuple(raw_readings),
            historical_readings=tuple(flatten_historical(bundle.get("registros"))),
            meter_map=dict(bundle.get("medidores") or {}),
            meter_db_rows=dict(bundle.get("medidores_db") or {}),
            employees=tuple(employees),
        )


def get_data_source(data_dir: Path) -> DataSource:
    """Default file layout: ``DatosConsulta.json`` and ``empleados.json`` in one directory."""
    return JsonFileDataSource(
        bundle_path=data_dir / "DatosConsulta.json",
        employees_path=data_dir / "empleados.json",
    )
