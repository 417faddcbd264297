"""finchart — Serve spreadsheet financials as chart-ready records."""

__version__ = "0.2.0"

COMPANY_COLUMN = "Company name"
FIELD_COLUMN = "Field"
DEFAULT_DATA_FILE = "Financials.xls"
UNKNOWN_LABEL = "UNKNOWN"

COMPANIES: list[str] = [
    "HCL Technologies Ltd.",
    "Infosys Ltd.",
    "Tata Consultancy Services Ltd.",
    "Wipro Ltd.",
    "Tech Mahindra Ltd.",
]
METRICS: list[str] = ["SALES", "EBITDA", "PAT"]
