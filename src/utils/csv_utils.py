import csv
import io
from typing import Any, Mapping, Sequence


def to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Serialize records to CSV using the first record's keys as the header.

    Later records are written in the same key order; missing keys are blank
    and extra keys are dropped. Values containing commas or quotes are quoted.
    """
    if not records:
        return ""
    header = list(records[0].keys())
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    for record in records:
        writer.writerow(["" if record.get(k) is None else record.get(k) for k in header])
    return buf.getvalue()
