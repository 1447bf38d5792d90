from .models import ParsedResult, ProbeOutcome
from .parser import format_date_fragment, parse_result_name

__all__ = [
    "ParsedResult",
    "ProbeOutcome",
    "format_date_fragment",
    "parse_result_name",
]
