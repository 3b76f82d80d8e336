import dataclasses

from clankerkit.constants import BPS_DENOMINATOR
from clankerkit.exceptions import PrecisionError
from clankerkit.logging import logger
from clankerkit.types.aliases import BasisPoints


@dataclasses.dataclass(slots=True, frozen=True)
class BpsAllocation:
    amount: int
    bps: BasisPoints
    allocated: int  # the amount the extension actually locks, `bps * total_supply / 10_000`

    @property
    def excess(self) -> int:
        return self.allocated - self.amount


def bps_of_supply(amount: int, total_supply: int) -> BasisPoints:
    """
    The share of `total_supply` needed to cover `amount`, in basis points, rounded up.

    On-chain extension allocations are expressed in basis points, so rounding down would lock
    less than the requested amount.
    """

    bps, remainder = divmod(amount * BPS_DENOMINATOR, total_supply)
    return bps + 1 if remainder else bps


def verify_bps_allocation(amount: int, bps: BasisPoints, total_supply: int) -> BpsAllocation:
    """
    Check that `bps` of `total_supply` covers `amount` and over-allocates by at most one basis
    point.

    The over-allocation bound uses truncating integer division, so an excess just short of two
    basis points passes.
    """

    allocated = bps * total_supply // BPS_DENOMINATOR

    if allocated < amount:
        raise PrecisionError(amount=amount, allocated=allocated, bps=bps)

    if (allocated - amount) * BPS_DENOMINATOR // total_supply > 1:
        raise PrecisionError(amount=amount, allocated=allocated, bps=bps)

    return BpsAllocation(amount=amount, bps=bps, allocated=allocated)


def allocate_bps(amount: int, total_supply: int) -> BpsAllocation:
    """
    Convert an absolute token amount into a verified basis-point share of the total supply.
    """

    allocation = verify_bps_allocation(
        amount=amount,
        bps=bps_of_supply(amount, total_supply),
        total_supply=total_supply,
    )
    logger.debug(
        f"Allocated {allocation.bps} bps ({allocation.allocated}) for requested amount {amount}, "
        f"excess {allocation.excess}"
    )
    return allocation
