"""Spreadsheet Export: members as an HTML table that spreadsheet apps open.

Invariants:
    - Column order: name, father/husband name, mobile, village name
    - Every cell value is HTML-escaped
    - Output is UTF-8 text; the route serves it as application/vnd.ms-excel
"""

from collections.abc import Iterable
from html import escape

from samaj_diary.models import Member

EXPORT_MEDIA_TYPE = "application/vnd.ms-excel"
EXPORT_FILENAME = "Member_List.xls"

_HEADERS = ("नाम", "पिता/पति का नाम", "मोबाइल", "गाँव का नाम")

_DOCUMENT_HEAD = """<html xmlns:o="urn:schemas-microsoft-com:office:office" \
xmlns:x="urn:schemas-microsoft-com:office:excel" \
xmlns="http://www.w3.org/TR/REC-html40">
<head>
<meta http-equiv="content-type" content="application/vnd.ms-excel; charset=UTF-8">
<style>
table { border-collapse: collapse; }
th { background-color: #1e3a8a; color: #ffffff; font-weight: bold; \
border: 1px solid #000000; padding: 8px; }
td { border: 1px solid #000000; padding: 8px; text-align: left; }
</style>
</head>
<body>
<table>
"""

_DOCUMENT_TAIL = "</tbody></table></body></html>\n"


def _row(cells: Iterable[str], tag: str) -> str:
    inner = "".join(f"<{tag}>{escape(c or '')}</{tag}>" for c in cells)
    return f"<tr>{inner}</tr>\n"


def build_member_sheet(members: Iterable[Member]) -> str:
    parts = [_DOCUMENT_HEAD, "<thead>\n", _row(_HEADERS, "th"), "</thead>\n<tbody>\n"]
    for m in members:
        parts.append(_row((m.name, m.father_name, m.mobile, m.village_name), "td"))
    parts.append(_DOCUMENT_TAIL)
    return "".join(parts)
