import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from . import data_handler

logger = logging.getLogger(__name__)

Sink = Callable[[list[Any]], Any]


class DataPipeline(ABC):
    """
    Abstract base class for report pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.

    Unlike a best-effort job, a failure in any step propagates to the caller:
    a report is either built from complete data or not written at all.
    """

    def __init__(self, report_type: str, sink: Optional[Sink] = None, dry_run: bool = False):
        self.report_type = report_type
        self.sink = sink if sink is not None else data_handler.save_outputs
        self.dry_run = dry_run

    def run(self) -> list[Any]:
        """
        Orchestrates the pipeline execution and returns the rows handed to the sink.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if not raw_data:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Writing an empty report.")

        # --- 2. TRANSFORM ---
        rows = self.transform(raw_data)

        # --- 3. LOAD ---
        self.load(rows)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return rows

    @abstractmethod
    def extract(self) -> list[Any]:
        """
        Pulls everything the report needs from upstream. Must be complete or raise.
        """
        pass

    @abstractmethod
    def transform(self, raw_data: list[Any]) -> list[Any]:
        """
        Turns extracted data into the final, validated report rows.
        """
        pass

    def load(self, rows: list[Any]):
        """
        Hands the rows to the sink. Sink failures are the sink's to report; nothing is retried.
        """
        if self.dry_run:
            logger.info(f"🧪 Dry run: {len(rows)} rows not written.")
            return
        self.sink(rows)
