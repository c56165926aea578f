"""
Concurrency Tests.

Validates that the conditional driver claim lets exactly one trip win.
"""

import asyncio

import pytest

from backend.app.core.exceptions import BusinessRuleError
from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus
from backend.app.services.trips import claim_driver, release_driver


@pytest.mark.asyncio
async def test_second_claim_on_same_driver_fails(database, make_driver, reload):
    driver, _ = await make_driver()

    async with database.session() as first:
        await claim_driver(first, driver.id)
        await first.commit()

    async with database.session() as second:
        with pytest.raises(BusinessRuleError) as exc_info:
            await claim_driver(second, driver.id)
        await second.rollback()

    assert "on_trip" in exc_info.value.message
    assert (await reload(Driver, driver.id)).status == DriverStatus.ON_TRIP


@pytest.mark.asyncio
async def test_racing_claims_have_one_winner(database, make_driver, reload):
    driver, _ = await make_driver()

    async def attempt():
        async with database.session() as session:
            try:
                await claim_driver(session, driver.id)
                await session.commit()
                return True
            except BusinessRuleError:
                await session.rollback()
                return False

    results = await asyncio.gather(attempt(), attempt())
    assert sorted(results) == [False, True]
    assert (await reload(Driver, driver.id)).status == DriverStatus.ON_TRIP


@pytest.mark.asyncio
async def test_release_only_touches_on_trip_drivers(database, make_driver, reload):
    driver, _ = await make_driver(status=DriverStatus.OFF_DUTY)

    async with database.session() as session:
        await release_driver(session, driver.id)
        await session.commit()

    assert (await reload(Driver, driver.id)).status == DriverStatus.OFF_DUTY
