from datetime import datetime
from pathlib import Path
from tqdm import tqdm

from . import settings


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def get_report_path(output: str | Path | None = None) -> Path:
    """
    Where the workbook goes. A bare filename lands in OUTPUT_DIR; anything with a
    directory part is used as given.
    """
    if output is None:
        return settings.OUTPUT_DIR / settings.REPORT_FILENAME
    path = Path(output)
    if path.parent == Path("."):
        return settings.OUTPUT_DIR / path
    return path


class ProgressBar:
    """
    Progress observer for the aggregation pass, drawn with tqdm.
    The bar is opened on the first tick (that's when the order count is known)
    and closed once the last order is in.
    """

    def __init__(self, desc: str = "Generating report", file=None, disable: bool | None = False):
        self.desc = desc
        self.file = file
        self.disable = disable
        self.bar: tqdm | None = None

    def __call__(self, done: int, total: int):
        if self.bar is None:
            self.bar = tqdm(
                total=total, desc=self.desc, unit="order", file=self.file, disable=self.disable
            )
        self.bar.update(done - self.bar.n)
        if done >= total:
            self.bar.close()
