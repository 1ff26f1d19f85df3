# collateral_auction/core/settings.py

from .. import config
from .errors import AuctionHouseError, FailureReason

WAD = config.WAD
RAY = config.RAY


class AuctionHouseSettings:
    """
    Process-wide auction house configuration.

    Discount parameters are copied into each auction when it starts; the
    minimum bid and the deviation bounds are read live by every price
    evaluation, so changing them affects auctions already running.
    """
    NUMERIC_PARAMETERS = (
        'minimum_bid',
        'min_discount',
        'max_discount',
        'per_second_discount_update_rate',
        'max_discount_update_rate_timeline',
        'lower_collateral_median_deviation',
        'upper_collateral_median_deviation',
        'lower_system_coin_median_deviation',
        'upper_system_coin_median_deviation',
        'min_system_coin_median_deviation',
    )

    def __init__(self,
                 minimum_bid: int = config.MINIMUM_BID,
                 min_discount: int = config.MIN_DISCOUNT,
                 max_discount: int = config.MAX_DISCOUNT,
                 per_second_discount_update_rate: int = config.PER_SECOND_DISCOUNT_UPDATE_RATE,
                 max_discount_update_rate_timeline: int = config.MAX_DISCOUNT_UPDATE_RATE_TIMELINE,
                 lower_collateral_median_deviation: int = config.LOWER_COLLATERAL_MEDIAN_DEVIATION,
                 upper_collateral_median_deviation: int = config.UPPER_COLLATERAL_MEDIAN_DEVIATION,
                 lower_system_coin_median_deviation: int = config.LOWER_SYSTEM_COIN_MEDIAN_DEVIATION,
                 upper_system_coin_median_deviation: int = config.UPPER_SYSTEM_COIN_MEDIAN_DEVIATION,
                 min_system_coin_median_deviation: int = config.MIN_SYSTEM_COIN_MEDIAN_DEVIATION):
        self.minimum_bid = int(minimum_bid)
        self.min_discount = int(min_discount)
        self.max_discount = int(max_discount)
        self.per_second_discount_update_rate = int(per_second_discount_update_rate)
        self.max_discount_update_rate_timeline = int(max_discount_update_rate_timeline)
        self.lower_collateral_median_deviation = int(lower_collateral_median_deviation)
        self.upper_collateral_median_deviation = int(upper_collateral_median_deviation)
        self.lower_system_coin_median_deviation = int(lower_system_coin_median_deviation)
        self.upper_system_coin_median_deviation = int(upper_system_coin_median_deviation)
        self.min_system_coin_median_deviation = int(min_system_coin_median_deviation)

    def validate(self, parameter: str, data: int, now: int) -> None:
        """Raises if ``data`` is not an acceptable value for ``parameter``. Never mutates."""
        if parameter not in self.NUMERIC_PARAMETERS:
            raise AuctionHouseError(FailureReason.UNRECOGNIZED_PARAMETER, parameter)
        if isinstance(data, bool) or not isinstance(data, int) or data < 0:
            raise AuctionHouseError(FailureReason.INVALID_PARAMETER_VALUE, f"{parameter}={data!r}")

        if parameter == 'min_discount':
            accepted = self.max_discount <= data < WAD
        elif parameter == 'max_discount':
            accepted = 0 < data <= self.min_discount and data < WAD
        elif parameter == 'per_second_discount_update_rate':
            accepted = data <= RAY
        elif parameter == 'max_discount_update_rate_timeline':
            accepted = data > 0 and now + data < config.MAX_UINT48
        elif parameter == 'minimum_bid':
            accepted = True
        else:
            # Every deviation bound is a fraction of one
            accepted = data <= WAD

        if not accepted:
            raise AuctionHouseError(FailureReason.INVALID_PARAMETER_VALUE, f"{parameter}={data}")

    def modify(self, parameter: str, data: int, now: int) -> None:
        self.validate(parameter, data, now)
        setattr(self, parameter, data)

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.NUMERIC_PARAMETERS}
