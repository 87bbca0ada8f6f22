"""Default scan universe, grouped by category."""

from __future__ import annotations

DEFAULT_CATEGORIES: dict[str, list[str]] = {
    "Technology": [
        "AAPL", "MSFT", "GOOGL", "AMZN", "META", "NVDA", "AMD", "INTC", "CRM", "ORCL",
        "CSCO", "IBM", "QCOM", "TXN", "AVGO", "MU", "AMAT", "LRCX", "KLAC", "SNPS",
    ],
    "Finance": [
        "JPM", "BAC", "WFC", "C", "GS", "MS", "BRK-B", "V", "MA", "AXP",
        "SCHW", "BLK", "SPGI", "MCO", "ICE", "CME", "AON", "MMC", "TRV", "MET",
    ],
    "Healthcare": ["JNJ", "UNH", "PFE", "MRK", "ABBV", "LLY", "BMY", "AMGN", "GILD", "CVS"],
    "Biotech": ["REGN", "VRTX", "MRNA", "BIIB", "ILMN", "INCY"],
    "Consumer": [
        "WMT", "PG", "KO", "PEP", "COST", "HD", "MCD", "NKE", "SBUX", "TGT",
        "LOW", "TJX", "ROST", "DG", "DLTR", "YUM", "CMG", "DPZ", "DKNG",
    ],
    "Energy": ["XOM", "CVX", "COP", "SLB", "EOG", "MPC", "VLO", "PSX", "OXY", "HAL"],
    "Industrial": [
        "BA", "CAT", "GE", "MMM", "HON", "UPS", "RTX", "LMT", "DE", "UNP",
        "FDX", "NSC", "CSX", "WM", "RSG", "GD", "NOC", "TDG", "ITW", "EMR",
    ],
    "Materials": ["LIN", "APD", "SHW", "ECL", "FCX", "NEM", "NUE", "DOW", "DD", "PPG"],
    "Telecom": ["VZ", "T", "TMUS", "CMCSA", "DIS", "NFLX", "CHTR"],
    "Utilities": ["NEE", "DUK", "SO", "D", "AEP", "EXC", "SRE", "XEL", "WEC", "ES"],
    "Real Estate": ["PLD", "AMT", "CCI", "EQIX", "PSA", "SPG", "O", "WELL", "DLR", "AVB"],
    "ETFs (Metals)": ["GLD", "SLV", "GDX", "GDXJ", "IAU"],
    "Value Picks": ["WDC", "PARA", "WBA", "VFC", "LUMN", "AAL", "UAL", "DAL", "F", "GM"],
}


def default_symbols() -> list[str]:
    """Every default symbol, in category order."""
    return [sym for symbols in DEFAULT_CATEGORIES.values() for sym in symbols]


def category_symbols(name: str) -> list[str]:
    """Symbols of one category, matched case-insensitively."""
    for category, symbols in DEFAULT_CATEGORIES.items():
        if category.lower() == name.strip().lower():
            return list(symbols)
    raise KeyError(f"Unknown category: {name}")
