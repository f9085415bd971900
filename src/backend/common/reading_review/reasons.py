"""Justification texts written to `obsValidacion`."""

OUT_OF_WINDOW = "fecha fuera de rango"
CONSUMPTION_IN_RANGE = "consumo dentro de rango"
CONSUMPTION_OUT_OF_RANGE = "consumo fuera de rango"
ALPHANUMERIC_CONFIRMED = "confirma lectura alfanumérica"
ALPHANUMERIC_PARTIAL = "confirmación incompleta de la lectura alfanumérica"
OPERATOR_AWARE = "operario consciente del error"
OPERATOR_UNAWARE = "operario no consciente del error"

MISSING_LATER_READING = "falta lectura posterior"
MISSING_EARLIER_READING = "falta lectura anterior"
READING_NOT_FOUND = "Lectura no encontrada"
READING_OUT_OF_RANGE = "Lectura Diferente"
KW_OUT_OF_RANGE = "valor fuera de rango esperado"
