import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- BigCommerce Credentials ---
API_HASH = os.getenv("API_HASH")
API_TOKEN = os.getenv("API_TOKEN")
API_BASE_URL = os.getenv("API_BASE_URL", "https://api.bigcommerce.com").rstrip("/")

# --- Order Listing ---
# Status 2 is "Shipped" in the V2 orders API.
ORDER_STATUS_ID = int(os.getenv("ORDER_STATUS_ID", "2"))
# 200 is the max page size allowed by the V2 orders endpoint.
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "200"))
# Hard stop for pagination in case upstream never returns a short page.
MAX_PAGES = int(os.getenv("MAX_PAGES", "10000"))

# --- Line-Item Fan-Out ---
# 0 means one worker per order.
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "16"))

# --- HTTP Transport ---
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))
HTTP_RETRY_ATTEMPTS = int(os.getenv("HTTP_RETRY_ATTEMPTS", "3"))

# --- Aggregation ---
# "warn" keeps the first-seen brand/title for a SKU, "error" aborts the run.
CONFLICT_POLICY = os.getenv("CONFLICT_POLICY", "warn").lower()

# --- Path Configuration ---
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
REPORT_FILENAME = os.getenv("REPORT_FILENAME", "SellThroughReport.xlsx")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILENAME = "sell_through.log"

# --- Report Layout ---
REPORT_SHEET_NAME = "Sell Through Report"
# Column header -> width, in the order they appear in the workbook.
REPORT_COLUMNS = {
    "Brand": 15,
    "SKU": 20,
    "Title": 30,
    "Quantity": 10,
}
HEADER_FILL_COLOR = "FFC0C0C0"
DATA_FILL_COLOR = "FFFFFFFF"

# --- Window Presets ---
WINDOW_PRESETS = [
    "past week",
    "past month",
    "past quarter",
    "past year",
    "custom",
]
CUSTOM_DATE_FORMAT = "%d/%m/%Y"
