from .invoice_date_window import INVOICE_DATE_WINDOW
from .field_normalization import (
    JUSTIFICATION_DEFAULT,
    NUMERIC_FIELDS,
    STATUS_DEFAULT,
    VERIFICATION_FIELDS,
)
from .consumption_average import CONSUMPTION_AVERAGE
from .observation_text import (
    ALPHANUMERIC_CONFIRMATION,
    OBSERVATION_KEYWORDS,
    OBSERVATION_NUMBERS,
)
from .reading_sequence import READING_SEQUENCE
from .digit_fault_location import DIGIT_FAULT_LOCATION
from .error_location_fallbacks import KW_ADJUSTED_MAGNITUDE, READING_OUT_OF_RANGE
from .operator_unaware import OPERATOR_UNAWARE_DISTINCT, OPERATOR_UNAWARE_REPEATED

__all__ = [
    "INVOICE_DATE_WINDOW",
    "STATUS_DEFAULT",
    "JUSTIFICATION_DEFAULT",
    "VERIFICATION_FIELDS",
    "NUMERIC_FIELDS",
    "CONSUMPTION_AVERAGE",
    "ALPHANUMERIC_CONFIRMATION",
    "OBSERVATION_KEYWORDS",
    "READING_SEQUENCE",
    "OBSERVATION_NUMBERS",
    "DIGIT_FAULT_LOCATION",
    "KW_ADJUSTED_MAGNITUDE",
    "READING_OUT_OF_RANGE",
    "OPERATOR_UNAWARE_REPEATED",
    "OPERATOR_UNAWARE_DISTINCT",
]
