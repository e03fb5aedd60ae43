import json
import logging
import os
from pathlib import Path
import pandas as pd
from openpyxl.styles import PatternFill

from . import settings
from . import utils
from .schemas import RankedRow

logger = logging.getLogger(__name__)


def rows_to_dataframe(rows: list[RankedRow]) -> pd.DataFrame:
    """Ranked rows as a frame with the report headers, in rank order."""
    columns = list(settings.REPORT_COLUMNS)
    records = [row.model_dump(by_alias=True) for row in rows]
    return pd.DataFrame(records, columns=columns)


def _style_sheet(worksheet, row_count: int):
    header_fill = PatternFill(fill_type="solid", fgColor=settings.HEADER_FILL_COLOR)
    data_fill = PatternFill(fill_type="solid", fgColor=settings.DATA_FILL_COLOR)

    for col_idx, (header, width) in enumerate(settings.REPORT_COLUMNS.items(), start=1):
        letter = worksheet.cell(row=1, column=col_idx).column_letter
        worksheet.column_dimensions[letter].width = width
        worksheet.cell(row=1, column=col_idx).fill = header_fill
        for row_idx in range(2, row_count + 2):
            worksheet.cell(row=row_idx, column=col_idx).fill = data_fill


def save_outputs(rows: list[RankedRow], path: str | Path | None = None) -> Path:
    """
    Writes the ranked rows to the sell-through workbook, replacing any previous one.

    The workbook is built in a temporary file next to the target and moved into
    place only once complete, so a failure never leaves a half-written report.
    Also writes a JSON copy when SAVE_JSON_OUTPUT is on.
    """
    report_path = utils.get_report_path(path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = report_path.with_name(f".{report_path.stem}.tmp{report_path.suffix}")

    df = rows_to_dataframe(rows)
    try:
        with pd.ExcelWriter(tmp_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=settings.REPORT_SHEET_NAME, index=False)
            _style_sheet(writer.sheets[settings.REPORT_SHEET_NAME], len(df))
        os.replace(tmp_path, report_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.info(f"✅ Report generated as '{report_path}' ({len(df)} SKUs).")

    if settings.SAVE_JSON_OUTPUT:
        json_path = report_path.with_name(
            f"{report_path.stem}_{utils.get_date_suffix_for_filename()}.json"
        )
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump([row.model_dump(mode="json", by_alias=True) for row in rows], f, indent=2)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.debug("INFO: Skipping JSON file save as per configuration.")

    return report_path


def remove_existing_report(path: str | Path | None = None) -> bool:
    """Deletes a report left over from an earlier run. Returns True if one was removed."""
    report_path = utils.get_report_path(path)
    if not report_path.exists():
        return False
    report_path.unlink()
    logger.info(f"Existing report deleted: {report_path}")
    return True
