from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    def __init__(self):
        self.now = datetime(year=2024, month=10, day=1, hour=0, minute=0, second=0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds=1):
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()
