import csv
import logging
import os

log = logging.getLogger(__name__)


class CSVWriter:
    """Writes ParsingResults as a presentation CSV (one row per message)."""

    COLUMNS = [
        ("filename", "Email File"),
        ("project_name", "Project Name"),
        ("partner_name", "Partner Name"),
        ("partner_email", "Partner Email"),
        ("communication_stage", "Communication Stage"),
        ("communication_sub_stage", "Communication Sub-Stage"),
        ("success", "Extraction Succeeded"),
        ("error_reason", "Failure Reason"),
        ("email_subject", "Email Subject"),
        ("email_date", "Email Date"),
    ]

    def __init__(self, csv_path):
        self.csv_path = csv_path

    def to_row(self, result):
        row = {}
        for attr, header in self.COLUMNS:
            value = getattr(result, attr)
            if attr == "success":
                value = "yes" if value else "no"
            row[header] = "" if value is None else value
        return row

    def write(self, results):
        out_dir = os.path.dirname(os.path.abspath(self.csv_path))
        os.makedirs(out_dir, exist_ok=True)
        header = [h for _, h in self.COLUMNS]
        # utf-8-sig so spreadsheet tools open CJK names correctly
        with open(self.csv_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.DictWriter(f, fieldnames=header)
            writer.writeheader()
            for result in results:
                writer.writerow(self.to_row(result))
        log.info("Wrote %d rows to %s", len(results), self.csv_path)
        return len(results)
