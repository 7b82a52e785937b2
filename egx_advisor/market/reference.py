"""Static EGX reference data: company/symbol maps and the official P/E table.

Loaded once into an immutable :class:`MarketReference` and handed to whatever
needs it through the dependency layer.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType


@dataclass(frozen=True)
class StaticFundamentals:
    pe_ratio: float | None
    dividend_yield: float | None
    eps: float | None = None


@dataclass(frozen=True)
class MarketReference:
    company_to_symbol: Mapping[str, str]
    static_fundamentals: Mapping[str, StaticFundamentals]
    symbol_to_company: Mapping[str, str] = field(init=False)

    def __post_init__(self) -> None:
        reverse = {symbol: name for name, symbol in self.company_to_symbol.items()}
        object.__setattr__(self, "symbol_to_company", MappingProxyType(reverse))

    def company_name(self, symbol: str) -> str:
        return self.symbol_to_company.get(symbol, symbol)

    def symbols(self) -> list[str]:
        return list(dict.fromkeys(self.company_to_symbol.values()))


_COMPANY_TO_SYMBOL = {
    "Abou Kir Fertilizers": "ABUK",
    "Commercial International Bank": "COMI",
    "Telecom Egypt": "ETEL",
    "ELSWEDY ELECTRIC": "SWDY",
    "Eastern Company": "EAST",
    "Palm Hills Development Company": "PHDC",
    "Orascom Construction PLC": "ORAS",
    "Orascom Development Egypt": "ORHD",
    "Sidi Kerir Petrochemicals - SIDPEC": "SKPC",
    "Alexandria Pharmaceuticals": "AXPH",
    "Misr Chemical Industries": "MICH",
    "Fawry For Banking Technology And Electronic Payment": "FWRY",
    "Housing & Development Bank": "HDBK",
    "CI Capital Holding For Financial Investments": "CICH",
    "B Investments Holding": "BINV",
    "Cleopatra Hospital Company": "CLHO",
    "Egypt Aluminum": "EGAL",
    "Misr Duty Free Shops": "MTIE",
    "Misr Hotels": "MHOT",
    "Six of October Development & Investment (SODIC)": "OCDI",
    "Madinet Masr For Housing and Development": "MASR",
    "Beltone Holding": "BTFH",
    "Glaxo Smith Kline": "GLAX",
    "East Delta Flour Mills": "EDFM",
    "Upper Egypt Flour Mills": "UEFM",
    "Al Baraka Bank Egypt": "SAUD",
    "Societe Arabe Internationale De Banque S.A.E.": "SAIB",
    "Suez Canal Bank S.A.E": "CANA",
    "Engineering Industries (ICON)": "ICON",
    "Naeem Holding": "NAHO",
    "Maridive & oil services": "MOIL",
    "MM Group For Industry And International Trade": "MMGR",
    "International Company For Fertilizers & Chemicals": "IFCH",
    "October Pharma": "OCPH",
    "Delta Insurance": "DEIN",
    "El Shams Housing & Urbanization": "ELSH",
    "United Housing & Development": "UEGC",
    "Dice Sport & Casual Wear": "DSCW",
    "Raya Customer Experience": "RAEC",
    "QALA For Financial Investments": "QFIN",
    "Valmore Holding-EGP": "VALM",
    "A Capital Holding": "ACAP",
    "Arabia Investments Holding": "AIND",
    "Tanmiya for Real Estate Investment": "TMEI",
}

# Official EGX P/E and dividend yield (egx.com.eg MarketPECompanies), January 2026.
# COMI is not on the specialised-activities list; its figures were entered by hand.
_STATIC_FUNDAMENTALS: dict[str, tuple[float, float, float | None]] = {
    "COMI": (7.52, 2.032, 16.36),
    "REMA": (21.84, 0, None),
    "ALEX": (215.48, 0, None),
    "ELWA": (111.50, 0, None),
    "DEIN": (3.09, 0, None),
    "ELSH": (10.35, 0.69, None),
    "UEGC": (19.08, 0, None),
    "ORHD": (7.51, 1.68, None),
    "CUFE": (41.90, 0, None),
    "MASR": (3.13, 5.79, None),
    "OCDI": (8.93, 0, None),
    "AMOC": (9.13, 3.02, None),
    "OSOO": (70.25, 0, None),
    "MHOT": (7.02, 6.09, None),
    "CESI": (54.00, 0, None),
    "MMGR": (12.39, 0, None),
    "MTIE": (7.86, 9.92, None),
    "ICON": (3.49, 4.10, None),
    "MOIL": (9.53, 0, None),
    "ETEL": (11.47, 2.21, None),
    "RAEC": (4.70, 0, None),
    "ORAS": (9.72, 3.02, None),
    "BINV": (4.88, 3.38, None),
    "SAIB": (2.03, 24.57, None),
    "SAUD": (3.81, 5.40, None),
    "EGAL": (10.45, 3.10, None),
    "QFIN": (1.32, 0, None),
    "CLHO": (22.58, 0, None),
    "VALM": (3.09, 7.78, None),
    "TMEI": (15.72, 0, None),
    "FWRY": (30.19, 0, None),
    "EMES": (172.62, 0, None),
    "ACAP": (34.14, 0, None),
    "IFCH": (7.99, 0, None),
    "WKOL": (36.01, 5.44, None),
    "IAPC": (19.34, 0, None),
    "ELSA": (11.97, 0, None),
    "CANA": (4.69, 0, None),
    "HDBK": (3.92, 5.44, None),
    "ATQA": (19.57, 0, None),
    "NAHO": (11.35, 0, None),
    "PHDC": (7.14, 0, None),
    "SKPC": (6.43, 6.94, None),
    "SWDY": (8.86, 1.28, None),
    "EAST": (27.54, 7.70, None),
    "ABUK": (6.99, 11.58, None),
    "GLAX": (28.05, 1.71, None),
    "MICH": (5.30, 14.53, None),
    "AXPH": (10.23, 7.87, None),
    "CICH": (3.79, 8.28, None),
    "BTFH": (18.43, 0, None),
    "DSCW": (4.97, 0, None),
    "OCPH": (15.10, 0, None),
    "EDFM": (8.24, 7.08, None),
    "UEFM": (11.07, 4.54, None),
    "SCGM": (253.50, 0, None),
}


@lru_cache(maxsize=1)
def load_market_reference() -> MarketReference:
    fundamentals = {
        symbol: StaticFundamentals(pe_ratio=pe, dividend_yield=dy, eps=eps)
        for symbol, (pe, dy, eps) in _STATIC_FUNDAMENTALS.items()
    }
    return MarketReference(
        company_to_symbol=MappingProxyType(dict(_COMPANY_TO_SYMBOL)),
        static_fundamentals=MappingProxyType(fundamentals),
    )
