from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

# Rates are compared and persisted at this number of decimal places.
RATE_PRECISION = 6


class Currency(str, Enum):
    AED = "AED"
    ARS = "ARS"
    AUD = "AUD"
    BAM = "BAM"
    BGN = "BGN"
    BHD = "BHD"
    BRL = "BRL"
    CAD = "CAD"
    CHF = "CHF"
    CLP = "CLP"
    CNY = "CNY"
    COP = "COP"
    CZK = "CZK"
    DKK = "DKK"
    EGP = "EGP"
    EUR = "EUR"
    GBP = "GBP"
    HKD = "HKD"
    HUF = "HUF"
    IDR = "IDR"
    ILS = "ILS"
    INR = "INR"
    ISK = "ISK"
    JOD = "JOD"
    JPY = "JPY"
    KRW = "KRW"
    KWD = "KWD"
    MAD = "MAD"
    MXN = "MXN"
    MYR = "MYR"
    NGN = "NGN"
    NOK = "NOK"
    NZD = "NZD"
    OMR = "OMR"
    PEN = "PEN"
    PHP = "PHP"
    PLN = "PLN"
    QAR = "QAR"
    RON = "RON"
    RSD = "RSD"
    SAR = "SAR"
    SEK = "SEK"
    SGD = "SGD"
    THB = "THB"
    TRY = "TRY"
    TWD = "TWD"
    UAH = "UAH"
    USD = "USD"
    VND = "VND"
    XAF = "XAF"
    XOF = "XOF"
    ZAR = "ZAR"


class RateSource(str, Enum):
    ECB = "ECB"
    FIXERIO = "FIXERIO"
    OPENEXCHANGE = "OPENEXCHANGE"


class RateFrequency(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"


class QuoteType(str, Enum):
    # DIRECT: raw value is base units per one foreign unit.
    # INDIRECT: raw value is foreign units per one base unit.
    DIRECT = "direct"
    INDIRECT = "indirect"


@dataclass(frozen=True)
class ExchangeRate:
    source: RateSource
    frequency: RateFrequency
    currency: Currency
    date: date
    rate: Decimal


@dataclass(frozen=True)
class PeggedCurrency:
    currency: Currency
    pegged_to: Currency
    rate: Decimal  # units of pegged_to worth one unit of currency


@dataclass(frozen=True)
class ProviderDescriptor:
    currency: Currency
    quote_type: QuoteType
    source: RateSource
    default_frequency: RateFrequency
    supported_frequencies: frozenset[RateFrequency] = field(default_factory=frozenset)


# Seeded into an empty store at bootstrap.
DEFAULT_PEGGED_CURRENCIES: tuple[PeggedCurrency, ...] = (
    PeggedCurrency(Currency.AED, Currency.USD, Decimal(1) / Decimal("3.6725")),
    PeggedCurrency(Currency.SAR, Currency.USD, Decimal(1) / Decimal("3.75")),
    PeggedCurrency(Currency.QAR, Currency.USD, Decimal(1) / Decimal("3.64")),
    PeggedCurrency(Currency.BHD, Currency.USD, Decimal(1) / Decimal("0.376")),
    PeggedCurrency(Currency.OMR, Currency.USD, Decimal(1) / Decimal("0.3845")),
    PeggedCurrency(Currency.JOD, Currency.USD, Decimal(1) / Decimal("0.709")),
    PeggedCurrency(Currency.BAM, Currency.EUR, Decimal(1) / Decimal("1.95583")),
    PeggedCurrency(Currency.XOF, Currency.EUR, Decimal(1) / Decimal("655.957")),
    PeggedCurrency(Currency.XAF, Currency.EUR, Decimal(1) / Decimal("655.957")),
)
