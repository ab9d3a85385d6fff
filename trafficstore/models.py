"""SQLAlchemy ORM models for the interface traffic store."""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declared_attr

from trafficstore.database import Base

# Largest value a BigInteger column holds.
BIGINT_MAX = 2**63 - 1


class Info(Base):
    """Key/value metadata such as the schema and tool version stamps."""

    __tablename__ = "info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), unique=True, nullable=False)
    value = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Info(name={self.name!r}, value={self.value!r})>"


class Interface(Base):
    """A monitored network interface.

    Attributes:
        id: Auto-incremented primary key, never reassigned.
        name: Unique interface name as reported by the operating system.
        alias: Optional display label.
        active: Whether the interface is currently being monitored.
        created: When the interface was first registered (local time).
        updated: Time of the most recent traffic write (local time).
        rxcounter: Last raw receive counter seen by the sampler.
        txcounter: Last raw transmit counter seen by the sampler.
        rxtotal: Lifetime received bytes, the sum of all recorded deltas.
        txtotal: Lifetime transmitted bytes, the sum of all recorded deltas.
    """

    __tablename__ = "interface"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    alias = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False)
    updated = Column(DateTime, nullable=False)
    rxcounter = Column(BigInteger, nullable=False, default=0)
    txcounter = Column(BigInteger, nullable=False, default=0)
    rxtotal = Column(BigInteger, nullable=False, default=0)
    txtotal = Column(BigInteger, nullable=False, default=0)

    def __repr__(self):
        return (
            f"<Interface(name={self.name!r}, active={self.active}, "
            f"rxtotal={self.rxtotal}, txtotal={self.txtotal})>"
        )


class TrafficBucketMixin:
    """Columns shared by the five per-resolution traffic series.

    Each row holds the traffic of one interface within one bucket, keyed by
    the bucket's start time. (interface, date) is unique per table.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime, nullable=False)
    rx = Column(BigInteger, nullable=False, default=0)
    tx = Column(BigInteger, nullable=False, default=0)

    @declared_attr
    def interface(cls):
        return Column(
            Integer,
            ForeignKey("interface.id", ondelete="CASCADE"),
            nullable=False,
        )

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "interface", "date", name=f"uq_{cls.__tablename__}_interface_date"
            ),
        )

    def __repr__(self):
        return (
            f"<{type(self).__name__}(interface={self.interface}, "
            f"date={self.date}, rx={self.rx}, tx={self.tx})>"
        )


class FiveMinute(TrafficBucketMixin, Base):
    __tablename__ = "fiveminute"


class Hour(TrafficBucketMixin, Base):
    __tablename__ = "hour"


class Day(TrafficBucketMixin, Base):
    __tablename__ = "day"


class Month(TrafficBucketMixin, Base):
    __tablename__ = "month"


class Year(TrafficBucketMixin, Base):
    __tablename__ = "year"
