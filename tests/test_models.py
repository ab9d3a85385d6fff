"""Tests for SQLAlchemy ORM models."""

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from trafficstore.models import Day, FiveMinute, Hour, Info, Interface, Month, Year

SERIES_MODELS = [FiveMinute, Hour, Day, Month, Year]


class TestInterface:
    """Tests for the Interface ORM model."""

    def test_repr(self):
        """__repr__ should include name and totals."""
        interface = Interface(name="eth0", active=True, rxtotal=1000, txtotal=2000)
        result = repr(interface)
        assert "eth0" in result
        assert "1000" in result

    def test_table_name(self):
        assert Interface.__tablename__ == "interface"

    def test_name_is_unique(self, test_session):
        """Two rows with the same name should violate the unique constraint."""
        now = datetime(2024, 3, 15, 14, 37)
        test_session.add(Interface(name="eth0", created=now, updated=now))
        test_session.commit()
        test_session.add(Interface(name="eth0", created=now, updated=now))
        with pytest.raises(IntegrityError):
            test_session.commit()
        test_session.rollback()

    def test_defaults(self, test_session):
        """Counters and totals should default to zero and active to True."""
        now = datetime(2024, 3, 15, 14, 37)
        interface = Interface(name="eth0", created=now, updated=now)
        test_session.add(interface)
        test_session.commit()
        assert interface.active is True
        assert (interface.rxcounter, interface.txcounter) == (0, 0)
        assert (interface.rxtotal, interface.txtotal) == (0, 0)


class TestInfo:
    def test_repr(self):
        assert repr(Info(name="dbversion", value="1")) == "<Info(name='dbversion', value='1')>"


class TestSeriesModels:
    """Tests for the five traffic series tables."""

    def test_table_names(self):
        assert [m.__tablename__ for m in SERIES_MODELS] == [
            "fiveminute",
            "hour",
            "day",
            "month",
            "year",
        ]

    def test_tables_are_distinct(self):
        """The mixin must give every series its own table and constraint."""
        tables = {m.__table__ for m in SERIES_MODELS}
        assert len(tables) == 5
        constraint_names = {
            c.name
            for m in SERIES_MODELS
            for c in m.__table__.constraints
            if c.name and c.name.startswith("uq_")
        }
        assert len(constraint_names) == 5

    def test_repr(self):
        bucket = Hour(interface=1, date=datetime(2024, 3, 15, 14), rx=10, tx=20)
        assert repr(bucket) == "<Hour(interface=1, date=2024-03-15 14:00:00, rx=10, tx=20)>"

    @pytest.mark.parametrize("model", SERIES_MODELS)
    def test_interface_date_is_unique(self, test_session, model):
        """A series holds at most one row per (interface, date)."""
        now = datetime(2024, 3, 15, 14, 37)
        interface = Interface(name="eth0", created=now, updated=now)
        test_session.add(interface)
        test_session.commit()

        bucket_date = datetime(2024, 3, 15)
        test_session.add(model(interface=interface.id, date=bucket_date, rx=1, tx=1))
        test_session.commit()
        test_session.add(model(interface=interface.id, date=bucket_date, rx=2, tx=2))
        with pytest.raises(IntegrityError):
            test_session.commit()
        test_session.rollback()

    @pytest.mark.parametrize("model", SERIES_MODELS)
    def test_requires_existing_interface(self, test_session, model):
        """Buckets cannot reference an interface that does not exist."""
        test_session.add(model(interface=42, date=datetime(2024, 3, 15), rx=1, tx=1))
        with pytest.raises(IntegrityError):
            test_session.commit()
        test_session.rollback()
