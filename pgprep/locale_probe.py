from datetime import date
from enum import StrEnum

from pgprep.constants import DATE_PROBE_DAY, DATE_PROBE_MONTH, DATE_PROBE_YEAR
from pgprep.host import HostEnvironment


class DateOrder(StrEnum):
    MDY = "mdy"
    DMY = "dmy"
    YMD = "ymd"


def detect_date_order(host: HostEnvironment | None = None) -> DateOrder:
    """
    Infer the field order of the locale's preferred date rendering, for the
    datestyle setting.

    We format mon=11, day=22, year=33 and look at where each number lands. This is a
    heuristic: it trusts that the three tokens appear unambiguously. Anything we
    can't read falls back to mdy, the postgres default.

    """
    host = host or HostEnvironment()
    rendered = host.format_locale_date(date(DATE_PROBE_YEAR, DATE_PROBE_MONTH, DATE_PROBE_DAY))
    if not rendered:
        return DateOrder.MDY

    pos_month = rendered.find("11")
    pos_day = rendered.find("22")
    pos_year = rendered.find("33")

    if pos_month < 0 or pos_day < 0 or pos_year < 0:
        return DateOrder.MDY
    if pos_year < pos_month < pos_day:
        return DateOrder.YMD
    if pos_day < pos_month:
        return DateOrder.DMY
    return DateOrder.MDY


def datestyle(order: DateOrder) -> str:
    return f"iso, {order}"
