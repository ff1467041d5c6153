"""Protocol constants shared by the engine components."""

# Fixed-point scale of USD values, debt units and health factors
PRECISION = 10**18
USD_DECIMALS = 18

# Scale between an 8-decimal feed answer and PRECISION
ADDITIONAL_FEED_PRECISION = 10**10

# Debt may be at most LIQUIDATION_THRESHOLD% of collateral value (200% collateralized)
LIQUIDATION_THRESHOLD = 50
LIQUIDATION_PRECISION = 100

# Extra collateral, in percent, paid to liquidators on top of the debt they cover
LIQUIDATION_BONUS = 10

MIN_HEALTH_FACTOR = 1 * PRECISION

# Sentinel for accounts without debt
MAX_HEALTH_FACTOR = 2**256 - 1

# Oracle answers older than this are rejected
ORACLE_TIMEOUT_SECONDS = 3 * 60 * 60
