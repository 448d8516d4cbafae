"""Trading pair identifiers as Bitstamp spells them in paths and channel names."""

BTC_EUR = "btceur"
BTC_USD = "btcusd"
EUR_USD = "eurusd"
XRP_USD = "xrpusd"
XRP_EUR = "xrpeur"
XRP_BTC = "xrpbtc"
LTC_USD = "ltcusd"
LTC_EUR = "ltceur"
LTC_BTC = "ltcbtc"
ETH_USD = "ethusd"
ETH_EUR = "etheur"
ETH_BTC = "ethbtc"
BCH_USD = "bchusd"
BCH_EUR = "bcheur"
BCH_BTC = "bchbtc"

ALL_PAIRS = frozenset(
    {
        BTC_EUR,
        BTC_USD,
        EUR_USD,
        XRP_USD,
        XRP_EUR,
        XRP_BTC,
        LTC_USD,
        LTC_EUR,
        LTC_BTC,
        ETH_USD,
        ETH_EUR,
        ETH_BTC,
        BCH_USD,
        BCH_EUR,
        BCH_BTC,
    }
)
