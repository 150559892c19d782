"""Fare calculation for journeys along a subway line."""

from dataclasses import dataclass

import structlog

from subway.core.auth import ANONYMOUS_AGE
from subway.core.telemetry import service_span
from subway.helpers.line_path import LinePath

logger = structlog.get_logger(__name__)

# Fares in won, distances in km
BASE_FARE = 1250
BASE_DISTANCE = 10
MID_DISTANCE = 50
ADDITIONAL_FARE_UNIT = 100
MID_BAND_STEP = 5  # +100 per started 5 km between 11 and 50 km
LONG_BAND_STEP = 8  # +100 per started 8 km beyond 50 km
MID_BAND_MAX_FARE = 800  # Mid band fully charged when distance exceeds 50 km

# Age discounts: (fare - DISCOUNT_DEDUCTION) * rate / 10
DISCOUNT_DEDUCTION = 350
CHILD_AGES = range(6, 13)
CHILD_RATE = 5
YOUTH_AGES = range(13, 20)
YOUTH_RATE = 8


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient


def fare_by_distance(distance: int) -> int:
    """
    Distance-only fare, before surcharge and discount.

    Args:
        distance: Journey distance in km

    Returns:
        Fare in won

    Examples:
        >>> fare_by_distance(10)
        1250
        >>> fare_by_distance(15)
        1450
        >>> fare_by_distance(51)
        2150
    """
    if distance <= BASE_DISTANCE:
        return BASE_FARE

    if distance > MID_DISTANCE:
        steps = _ceil_div(distance - (MID_DISTANCE + 1), LONG_BAND_STEP) + 1
        return BASE_FARE + MID_BAND_MAX_FARE + steps * ADDITIONAL_FARE_UNIT

    steps = _ceil_div(distance - (BASE_DISTANCE + 1), MID_BAND_STEP) + 1
    return BASE_FARE + steps * ADDITIONAL_FARE_UNIT


def discount_by_age(fare: int, age: int) -> int:
    """
    Apply the child/youth discount.

    Args:
        fare: Fare including surcharge
        age: Rider age, or ANONYMOUS_AGE

    Returns:
        Discounted fare; unchanged for adults and anonymous riders

    Examples:
        >>> discount_by_age(2450, 10)
        1050
        >>> discount_by_age(2450, 15)
        1680
        >>> discount_by_age(2450, -1)
        2450
    """
    if age in CHILD_AGES:
        return _trunc_div((fare - DISCOUNT_DEDUCTION) * CHILD_RATE, 10)
    if age in YOUTH_AGES:
        return _trunc_div((fare - DISCOUNT_DEDUCTION) * YOUTH_RATE, 10)
    return fare


@dataclass(frozen=True)
class FareQuote:
    """Fare for travelling a whole line."""

    distance: int
    duration: int
    surcharge: int
    fare: int
    rider_age: int


class FareCalculator:
    """Computes rider-facing fares for journeys over a LinePath."""

    def __init__(self, path: LinePath) -> None:
        """
        Initialize the calculator.

        Args:
            path: Path whose lines provide the surcharge
        """
        self.path = path

    def get_total_distance(self) -> int:
        return self.path.total_distance

    def get_total_duration(self) -> int:
        return self.path.total_duration

    def line_surcharge(self) -> int:
        """Highest additional fare among the path's lines (charged once, not summed)."""
        return max((line.additional_fare for line in self.path.lines), default=0)

    def get_total_fare(self, distance: int, rider_age: int = ANONYMOUS_AGE) -> int:
        """
        Fare for a journey of `distance` km.

        Journeys within the base distance pay the base fare with no surcharge and
        no discount.

        Args:
            distance: Journey distance in km
            rider_age: Rider age from the authentication context, ANONYMOUS_AGE if none

        Returns:
            Fare in won
        """
        with service_span("fare.calculate", "fare-service", distance=distance, rider_age=rider_age) as span:
            if distance <= BASE_DISTANCE:
                fare = BASE_FARE
            else:
                fare = discount_by_age(fare_by_distance(distance) + self.line_surcharge(), rider_age)

            span.set_attribute("fare.amount", fare)
            logger.debug("fare_calculated", distance=distance, rider_age=rider_age, fare=fare)
            return fare

    def quote(self, rider_age: int = ANONYMOUS_AGE) -> FareQuote:
        """
        Fare for travelling the whole path.

        Args:
            rider_age: Rider age from the authentication context, ANONYMOUS_AGE if none

        Returns:
            FareQuote with totals, surcharge and fare
        """
        distance = self.get_total_distance()
        return FareQuote(
            distance=distance,
            duration=self.get_total_duration(),
            surcharge=self.line_surcharge(),
            fare=self.get_total_fare(distance, rider_age),
            rider_age=rider_age,
        )
